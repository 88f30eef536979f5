"""Branch model."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from ..database import Base
from .types import UTCDateTime, utcnow


class Branch(Base):
    """An independent line of development within a document."""

    __tablename__ = "branches"
    __table_args__ = (
        Index("ix_branches_document_id", "document_id"),
    )

    id = Column(String(36), primary_key=True)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    is_main_branch = Column(Boolean, nullable=False, default=False)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    document = relationship("Document", back_populates="branches")
    versions = relationship(
        "Version",
        back_populates="branch",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
