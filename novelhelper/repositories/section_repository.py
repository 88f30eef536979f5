"""Section repository for database operations."""

from typing import List, Optional

from sqlalchemy import func

from ..models import Section
from ..exceptions import SectionNotFoundError
from .base import BaseRepository


class SectionRepository(BaseRepository[Section]):
    """Repository for section CRUD operations."""

    model_class = Section
    not_found_error = SectionNotFoundError

    def create(self, section_id: str, version_id: str, title: str, content_ref: str, order: int) -> Section:
        db_section = Section(
            id=section_id,
            version_id=version_id,
            title=title,
            content_ref=content_ref,
            order=order,
        )
        self.db.add(db_section)
        self.db.flush()
        return db_section

    def update(self, section: Section, title: str, content_ref: str, order: int) -> Section:
        section.title = title
        section.content_ref = content_ref
        section.order = order
        self.db.flush()
        return section

    def list_by_version(self, version_id: str) -> List[Section]:
        """Sections of a version in presentation order."""
        return self._base_query().filter(
            Section.version_id == version_id
        ).order_by(Section.order, Section.id).all()

    def list_by_versions(self, version_ids: List[str]) -> List[Section]:
        if not version_ids:
            return []
        return self._base_query().filter(Section.version_id.in_(version_ids)).all()

    def get_by_order(self, version_id: str, order: int) -> Optional[Section]:
        return self._base_query().filter(
            Section.version_id == version_id,
            Section.order == order,
        ).first()

    def next_order(self, version_id: str) -> int:
        """Order value that appends after the current last section."""
        current = self.db.query(func.max(Section.order)).filter(
            Section.version_id == version_id
        ).scalar()
        return 0 if current is None else current + 1
