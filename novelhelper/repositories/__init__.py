"""Data access repositories (the metadata store)."""

from .base import BaseRepository
from .document_repository import DocumentRepository
from .branch_repository import BranchRepository
from .version_repository import VersionRepository
from .section_repository import SectionRepository

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "BranchRepository",
    "VersionRepository",
    "SectionRepository",
]
