"""Version repository for database operations."""

from typing import List, Optional

from sqlalchemy import func

from ..models import Branch, Version
from ..models.types import utcnow
from ..exceptions import VersionNotFoundError
from .base import BaseRepository


class VersionRepository(BaseRepository[Version]):
    """Repository for version CRUD and sync-flag operations."""

    model_class = Version
    not_found_error = VersionNotFoundError

    def create(
        self,
        version_id: str,
        branch_id: str,
        title: str,
        content_ref: str,
        diff_from_version_id: Optional[str] = None,
        diff_ref: Optional[str] = None,
        created_at=None,
    ) -> Version:
        """Create a new, unsynced version numbered after the branch's last one."""
        db_version = Version(
            id=version_id,
            branch_id=branch_id,
            number=self.next_number(branch_id),
            title=title,
            content_ref=content_ref,
            diff_from_version_id=diff_from_version_id,
            diff_ref=diff_ref,
            created_at=created_at or utcnow(),
            is_synced_to_cloud=False,
        )
        self.db.add(db_version)
        self.db.flush()
        return db_version

    def update(self, version: Version, title: str, content_ref: str) -> Version:
        """Replace title and content locator; an edited version is unsynced."""
        version.title = title
        version.content_ref = content_ref
        version.is_synced_to_cloud = False
        self.db.flush()
        return version

    def next_number(self, branch_id: str) -> int:
        current = self.db.query(func.max(Version.number)).filter(
            Version.branch_id == branch_id
        ).scalar()
        return (current or 0) + 1

    def list_by_branch(self, branch_id: str, skip: int = 0, limit: Optional[int] = None) -> List[Version]:
        """Versions of a branch, newest first. ``limit=None`` returns them all."""
        return self._base_query().filter(
            Version.branch_id == branch_id
        ).order_by(
            Version.created_at.desc(), Version.number.desc()
        ).offset(skip).limit(limit).all()

    def get_latest(self, branch_id: str) -> Optional[Version]:
        """Most recent version of a branch by created_at."""
        return self._base_query().filter(
            Version.branch_id == branch_id
        ).order_by(Version.created_at.desc(), Version.number.desc()).first()

    def list_by_document(self, document_id: str) -> List[Version]:
        return self._base_query().join(Branch).filter(
            Branch.document_id == document_id
        ).all()

    def list_referencing(self, version_id: str) -> List[Version]:
        """Versions whose diff was computed against ``version_id``."""
        return self._base_query().filter(
            Version.diff_from_version_id == version_id
        ).order_by(Version.created_at, Version.number).all()

    def list_unsynced(self) -> List[Version]:
        """Versions waiting for upload, oldest first (stable order)."""
        return self._base_query().filter(
            Version.is_synced_to_cloud.is_(False)
        ).order_by(Version.created_at, Version.id).all()

    def mark_synced(self, version_id: str) -> None:
        """Flip the sync flag on. Idempotent; missing ids are ignored."""
        self._base_query().filter(Version.id == version_id).update(
            {Version.is_synced_to_cloud: True}, synchronize_session="fetch"
        )
        self.db.flush()

    def mark_unsynced(self, version: Version) -> None:
        version.is_synced_to_cloud = False
        self.db.flush()
