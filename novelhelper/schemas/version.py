"""Version schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class VersionBase(BaseModel):
    """Base version schema."""
    content: str = ""
    title: str = Field("", max_length=255)


class VersionCreate(VersionBase):
    """Schema for saving a new version."""
    pass


class VersionUpdate(VersionBase):
    """Schema for editing an existing version in place."""
    pass


class VersionResponse(VersionBase):
    """Schema for version response, content joined from the blob store."""
    id: str
    branch_id: str
    number: int
    diff_from_version_id: Optional[str] = None
    created_at: datetime
    is_synced_to_cloud: bool


class VersionDiffResponse(BaseModel):
    """Stored diff between a version and its predecessor."""
    version_id: str
    diff_from_version_id: str
    diff: str
