"""Pydantic schemas for request/response validation."""

from .document import DocumentCreate, DocumentUpdate, DocumentResponse, DocumentDetailResponse
from .branch import BranchCreate, BranchUpdate, BranchResponse
from .version import VersionCreate, VersionUpdate, VersionResponse, VersionDiffResponse
from .section import SectionCreate, SectionUpdate, SectionReorder, SectionResponse
from .sync import SyncStarted, SyncInProgress, SyncCompleted, SyncFailed, SyncProgress, parse_progress

__all__ = [
    "DocumentCreate", "DocumentUpdate", "DocumentResponse", "DocumentDetailResponse",
    "BranchCreate", "BranchUpdate", "BranchResponse",
    "VersionCreate", "VersionUpdate", "VersionResponse", "VersionDiffResponse",
    "SectionCreate", "SectionUpdate", "SectionReorder", "SectionResponse",
    "SyncStarted", "SyncInProgress", "SyncCompleted", "SyncFailed", "SyncProgress",
    "parse_progress",
]
