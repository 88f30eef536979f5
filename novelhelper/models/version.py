"""Version model."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from ..database import Base
from .types import UTCDateTime, utcnow


class Version(Base):
    """Snapshot of a branch's content.

    Content and the diff against the predecessor live in the blob store;
    the row only keeps their locators.
    """

    __tablename__ = "versions"
    __table_args__ = (
        Index("ix_versions_branch_id", "branch_id"),
        Index("ix_versions_created_at", "created_at"),
        Index("ix_versions_is_synced_to_cloud", "is_synced_to_cloud"),
    )

    id = Column(String(36), primary_key=True)
    branch_id = Column(String(36), ForeignKey("branches.id", ondelete="CASCADE"), nullable=False)

    # 1-based ordinal within the branch; breaks created_at ties
    number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False, default="")

    content_ref = Column(Text, nullable=False)
    diff_from_version_id = Column(
        String(36), ForeignKey("versions.id", ondelete="SET NULL"), nullable=True
    )
    diff_ref = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    is_synced_to_cloud = Column(Boolean, nullable=False, default=False)

    branch = relationship("Branch", back_populates="versions")
    sections = relationship(
        "Section",
        back_populates="version",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Section.order",
    )
