"""Business logic services."""

from .document_service import DocumentService
from .sync_service import SyncService

__all__ = ["DocumentService", "SyncService"]
