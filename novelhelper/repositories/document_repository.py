"""Document repository for database operations."""

from typing import List, Optional
from datetime import datetime

from sqlalchemy import func

from ..models import Document
from ..models.types import utcnow
from ..exceptions import DocumentNotFoundError
from .base import BaseRepository


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DocumentRepository(BaseRepository[Document]):
    """Repository for document CRUD operations."""

    model_class = Document
    not_found_error = DocumentNotFoundError

    def create(
        self,
        doc_id: str,
        title: str,
        author_id: str,
        synopsis: str = "",
        cover_image_path: Optional[str] = None,
    ) -> Document:
        """Create a new document."""
        now = utcnow()
        db_document = Document(
            id=doc_id,
            title=title,
            author_id=author_id,
            synopsis=synopsis,
            cover_image_path=cover_image_path,
            created_at=now,
            updated_at=now,
        )
        self.db.add(db_document)
        self.db.flush()
        return db_document

    def update(
        self,
        document: Document,
        title: str,
        synopsis: str,
        cover_image_path: Optional[str] = None,
    ) -> Document:
        """Replace the mutable fields (last writer wins)."""
        document.title = title
        document.synopsis = synopsis
        document.cover_image_path = cover_image_path
        self.touch(document)
        return document

    def touch(self, document: Document, when: Optional[datetime] = None) -> None:
        """Bump updated_at, never moving it backwards."""
        when = when or utcnow()
        if document.updated_at is None or when > document.updated_at:
            document.updated_at = when
        self.db.flush()

    def get_all(self, skip: int = 0, limit: int = 100) -> List[Document]:
        """All documents, most recently updated first."""
        return self._base_query().order_by(
            Document.updated_at.desc(), Document.id
        ).offset(skip).limit(limit).all()

    def search(self, query: str, limit: int = 50) -> List[Document]:
        """Case-insensitive substring match on titles."""
        pattern = f"%{_escape_like(query.lower())}%"
        return self._base_query().filter(
            func.lower(Document.title).like(pattern, escape="\\")
        ).order_by(Document.updated_at.desc(), Document.id).limit(limit).all()
