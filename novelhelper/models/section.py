"""Section model."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from ..database import Base


class Section(Base):
    """Named, ordered chunk of a version (e.g. a chapter)."""

    __tablename__ = "sections"
    __table_args__ = (
        Index("ix_sections_version_id", "version_id"),
    )

    id = Column(String(36), primary_key=True)
    version_id = Column(String(36), ForeignKey("versions.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False, default="")
    content_ref = Column(Text, nullable=False)

    # Unique per version (enforced by DocumentService); gaps are fine.
    order = Column("order", Integer, nullable=False)

    version = relationship("Version", back_populates="sections")
