"""Document model."""

from sqlalchemy import Column, Index, String, Text
from sqlalchemy.orm import relationship
from ..database import Base
from .types import UTCDateTime, utcnow


class Document(Base):
    """Top-level writing project."""

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_updated_at", "updated_at"),
        Index("ix_documents_author_id", "author_id"),
    )

    id = Column(String(36), primary_key=True)  # uuid4
    title = Column(String(255), nullable=False)
    author_id = Column(String(255), nullable=False)
    synopsis = Column(Text, nullable=False, default="")
    cover_image_path = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    branches = relationship(
        "Branch",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
