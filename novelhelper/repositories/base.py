"""Base repository with shared get-by-ID patterns.

Subclasses specify model_class and not_found_error; the base provides
get_by_id (raising) and get_by_id_optional (returning None).
"""

from typing import TypeVar, Generic, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import NovelHelperException

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., Document)
        not_found_error: Exception class to raise from get_by_id
    """

    model_class: Type[ModelT]
    not_found_error: Type[NovelHelperException]

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def get_by_id(self, entity_id: str) -> ModelT:
        """Get entity by primary key. Raises not_found_error if missing."""
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity

    def get_by_id_optional(self, entity_id: str) -> Optional[ModelT]:
        """Get entity by primary key, or None if not found."""
        return self._base_query().filter(self.model_class.id == entity_id).first()

    def delete(self, entity: ModelT) -> None:
        """Delete a row; children go with it through the foreign-key cascade."""
        self.db.delete(entity)
        self.db.flush()
