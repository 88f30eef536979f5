"""Section schemas."""

from pydantic import BaseModel, Field
from typing import List, Optional


class SectionCreate(BaseModel):
    """Schema for creating a section. ``order`` defaults to after the last one."""
    title: str = Field("", max_length=255)
    content: str = ""
    order: Optional[int] = None


class SectionUpdate(BaseModel):
    """Schema for updating a section (full replace)."""
    title: str = Field("", max_length=255)
    content: str = ""
    order: int


class SectionReorder(BaseModel):
    """New presentation sequence of a version's sections."""
    section_ids: List[str]


class SectionResponse(BaseModel):
    """Schema for section response, content joined from the blob store."""
    id: str
    version_id: str
    title: str
    content: str
    order: int
