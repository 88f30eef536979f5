"""Branch schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class BranchCreate(BaseModel):
    """Schema for creating a branch.

    At most one of ``source_content`` / ``source_version_id`` may be set;
    either seeds the branch with an initial version titled ``version_title``.
    """
    name: str = Field(..., min_length=1, max_length=255)
    is_main_branch: bool = False
    source_content: Optional[str] = None
    source_version_id: Optional[str] = None
    version_title: str = Field("Initial Version", max_length=255)


class BranchUpdate(BaseModel):
    """Schema for renaming a branch."""
    name: str = Field(..., min_length=1, max_length=255)


class BranchResponse(BaseModel):
    """Schema for branch response."""
    id: str
    document_id: str
    name: str
    is_main_branch: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
