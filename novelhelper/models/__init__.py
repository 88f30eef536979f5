"""Database models."""

from .document import Document
from .branch import Branch
from .version import Version
from .section import Section

__all__ = ["Document", "Branch", "Version", "Section"]
