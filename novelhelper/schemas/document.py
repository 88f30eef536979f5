"""Document schemas."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional

from .branch import BranchResponse


class DocumentBase(BaseModel):
    """Base document schema."""
    title: str = Field(..., min_length=1, max_length=255)
    synopsis: str = ""
    cover_image_path: Optional[str] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return v


class DocumentCreate(DocumentBase):
    """Schema for creating a document."""
    author_id: str = Field(..., min_length=1, max_length=255)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "The Long Winter",
                    "author_id": "author-1",
                    "synopsis": "A village waits out a winter that does not end.",
                }
            ]
        }
    }


class DocumentUpdate(DocumentBase):
    """Schema for updating a document (full replace of mutable fields)."""
    pass


class DocumentResponse(BaseModel):
    """Document as returned by list and search endpoints."""
    id: str
    title: str
    author_id: str
    synopsis: str
    cover_image_path: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DocumentDetailResponse(DocumentResponse):
    """Single document with its branches."""
    branches: List[BranchResponse] = []
