"""Branch repository for database operations."""

from typing import List, Optional
from datetime import datetime

from ..models import Branch
from ..models.types import utcnow
from ..exceptions import BranchNotFoundError
from .base import BaseRepository


class BranchRepository(BaseRepository[Branch]):
    """Repository for branch CRUD operations."""

    model_class = Branch
    not_found_error = BranchNotFoundError

    def create(self, branch_id: str, document_id: str, name: str, is_main_branch: bool = False) -> Branch:
        """Create a new branch."""
        now = utcnow()
        db_branch = Branch(
            id=branch_id,
            document_id=document_id,
            name=name,
            is_main_branch=is_main_branch,
            created_at=now,
            updated_at=now,
        )
        self.db.add(db_branch)
        self.db.flush()
        return db_branch

    def update(self, branch: Branch, name: str) -> Branch:
        branch.name = name
        self.touch(branch)
        return branch

    def touch(self, branch: Branch, when: Optional[datetime] = None) -> None:
        """Bump updated_at, never moving it backwards."""
        when = when or utcnow()
        if branch.updated_at is None or when > branch.updated_at:
            branch.updated_at = when
        self.db.flush()

    def list_by_document(self, document_id: str) -> List[Branch]:
        """Branches of a document, most recently updated first."""
        return self._base_query().filter(
            Branch.document_id == document_id
        ).order_by(Branch.updated_at.desc(), Branch.id).all()

    def get_main_for_document(self, document_id: str) -> Optional[Branch]:
        return self._base_query().filter(
            Branch.document_id == document_id,
            Branch.is_main_branch.is_(True),
        ).order_by(Branch.created_at).first()

    def clear_main_flag(self, document_id: str, keep_branch_id: Optional[str] = None) -> int:
        """Demote every main branch of a document except ``keep_branch_id``."""
        query = self._base_query().filter(
            Branch.document_id == document_id,
            Branch.is_main_branch.is_(True),
        )
        if keep_branch_id is not None:
            query = query.filter(Branch.id != keep_branch_id)
        demoted = 0
        for branch in query.all():
            branch.is_main_branch = False
            demoted += 1
        self.db.flush()
        return demoted
