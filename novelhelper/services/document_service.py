"""Document service, the deep module for the document content store.

Owns the full lifecycle of documents, branches, versions and sections, and
is the only place that touches both the metadata repositories and the blob
store. Two rules keep them consistent:

- blob writes happen before the metadata commit and blob deletes after it,
  so a crash can orphan a file but never leaves a row without its blob;
- every content edit marks the owning version unsynced and bumps
  ``updated_at`` on its branch and document.
"""

import logging
import uuid
from datetime import datetime, timedelta
from pathlib import PurePosixPath
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..exceptions import ValidationError
from ..models import Branch, Section, Version
from ..models.types import utcnow
from ..repositories import BranchRepository, DocumentRepository, SectionRepository, VersionRepository
from ..schemas.branch import BranchResponse
from ..schemas.document import DocumentDetailResponse, DocumentResponse
from ..schemas.section import SectionResponse
from ..schemas.version import VersionDiffResponse, VersionResponse
from ..storage.blob_store import BlobNamespace, BlobStore, diff_key
from .diff_utils import compute_diff

MAIN_BRANCH_NAME = "Main Branch"
INITIAL_VERSION_TITLE = "Initial Version"

logger = logging.getLogger(__name__)

DiffFunction = Callable[[str, str], str]
BlobKey = Tuple[BlobNamespace, str]


def _new_id() -> str:
    return str(uuid.uuid4())


class DocumentService:
    """Deep module for document content operations.

    Getters and update/delete methods return ``None``/``False`` for unknown
    ids. Creating a child under a missing parent raises the parent's
    NotFound error. Blob I/O failures propagate as ``BlobStoreError``.
    """

    def __init__(self, db: Session, blobs: BlobStore, diff: DiffFunction = compute_diff):
        self.db = db
        self.blobs = blobs
        self.diff = diff
        self.doc_repo = DocumentRepository(db)
        self.branch_repo = BranchRepository(db)
        self.version_repo = VersionRepository(db)
        self.section_repo = SectionRepository(db)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def create_document(
        self,
        title: str,
        author_id: str,
        synopsis: str = "",
        cover_image_path: Optional[str] = None,
    ) -> str:
        """Create a document together with its main branch."""
        doc_id = _new_id()
        self.doc_repo.create(doc_id, title, author_id, synopsis, cover_image_path)
        self.branch_repo.create(_new_id(), doc_id, MAIN_BRANCH_NAME, is_main_branch=True)
        self.db.commit()
        logger.info("Created document", extra={"doc_id": doc_id})
        return doc_id

    def update_document(
        self,
        doc_id: str,
        title: str,
        synopsis: str,
        cover_image_path: Optional[str] = None,
    ) -> Optional[DocumentResponse]:
        document = self.doc_repo.get_by_id_optional(doc_id)
        if document is None:
            return None
        self.doc_repo.update(document, title, synopsis, cover_image_path)
        self.db.commit()
        return DocumentResponse.model_validate(document)

    def delete_document(self, doc_id: str) -> bool:
        """Delete a document, its whole tree of rows, and every blob under it."""
        document = self.doc_repo.get_by_id_optional(doc_id)
        if document is None:
            return False

        doomed = self._blob_keys_for(self.version_repo.list_by_document(doc_id))
        self.doc_repo.delete(document)
        self.db.commit()
        self._delete_blobs(doomed)
        logger.info("Deleted document", extra={"doc_id": doc_id, "blobs": len(doomed)})
        return True

    def get_document(self, doc_id: str) -> Optional[DocumentDetailResponse]:
        document = self.doc_repo.get_by_id_optional(doc_id)
        if document is None:
            return None
        branches = self.branch_repo.list_by_document(doc_id)
        return DocumentDetailResponse(
            **DocumentResponse.model_validate(document).model_dump(),
            branches=[BranchResponse.model_validate(b) for b in branches],
        )

    def list_documents(self, skip: int = 0, limit: int = 100) -> List[DocumentResponse]:
        return [DocumentResponse.model_validate(d) for d in self.doc_repo.get_all(skip, limit)]

    def search_documents(self, query: str, limit: int = 50) -> List[DocumentResponse]:
        """Documents whose title contains ``query``, ignoring case."""
        return [DocumentResponse.model_validate(d) for d in self.doc_repo.search(query, limit)]

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def create_branch(
        self,
        document_id: str,
        name: str,
        is_main_branch: bool = False,
        source_content: Optional[str] = None,
        source_version_id: Optional[str] = None,
        version_title: str = INITIAL_VERSION_TITLE,
    ) -> str:
        """Create a branch, optionally seeded with an initial version.

        ``source_content`` seeds the branch with that text;
        ``source_version_id`` copies an existing version of the same
        document (content and sections). A new main branch demotes the
        previous one.
        """
        if source_content is not None and source_version_id is not None:
            raise ValidationError(
                "Seed a branch from content or from a version, not both",
                field="source_version_id",
            )

        document = self.doc_repo.get_by_id(document_id)
        source = None
        if source_version_id is not None:
            source = self.version_repo.get_by_id(source_version_id)
            if source.branch.document_id != document_id:
                raise ValidationError(
                    "Source version belongs to another document", field="source_version_id"
                )

        if is_main_branch:
            self.branch_repo.clear_main_flag(document_id)
        branch = self.branch_repo.create(_new_id(), document_id, name, is_main_branch)

        if source is not None:
            self._copy_version(branch, source, version_title)
        elif source_content is not None:
            self._insert_version(branch, source_content, version_title)

        self.doc_repo.touch(document)
        self.db.commit()
        logger.info(
            "Created branch",
            extra={"doc_id": document_id, "branch_id": branch.id, "seeded_from": source_version_id},
        )
        return branch.id

    def update_branch(self, branch_id: str, name: str) -> Optional[BranchResponse]:
        branch = self.branch_repo.get_by_id_optional(branch_id)
        if branch is None:
            return None
        self.branch_repo.update(branch, name)
        self.doc_repo.touch(branch.document, branch.updated_at)
        self.db.commit()
        return BranchResponse.model_validate(branch)

    def set_main_branch(self, branch_id: str) -> Optional[BranchResponse]:
        """Make this branch the document's only main branch."""
        branch = self.branch_repo.get_by_id_optional(branch_id)
        if branch is None:
            return None
        self.branch_repo.clear_main_flag(branch.document_id, keep_branch_id=branch.id)
        branch.is_main_branch = True
        self._touch_branch(branch)
        self.db.commit()
        return BranchResponse.model_validate(branch)

    def delete_branch(self, branch_id: str) -> bool:
        """Delete a branch with its versions and their blobs.

        If it was the main branch, the most recently updated remaining
        branch takes over.
        """
        branch = self.branch_repo.get_by_id_optional(branch_id)
        if branch is None:
            return False

        document = branch.document
        was_main = branch.is_main_branch
        doomed = self._blob_keys_for(self.version_repo.list_by_branch(branch_id))

        self.branch_repo.delete(branch)
        if was_main:
            remaining = self.branch_repo.list_by_document(document.id)
            if remaining:
                remaining[0].is_main_branch = True
        self.doc_repo.touch(document)
        self.db.commit()

        self._delete_blobs(doomed)
        logger.info("Deleted branch", extra={"branch_id": branch_id, "blobs": len(doomed)})
        return True

    def get_branch(self, branch_id: str) -> Optional[BranchResponse]:
        branch = self.branch_repo.get_by_id_optional(branch_id)
        return BranchResponse.model_validate(branch) if branch else None

    def list_branches(self, document_id: str) -> List[BranchResponse]:
        return [BranchResponse.model_validate(b) for b in self.branch_repo.list_by_document(document_id)]

    def get_main_branch(self, document_id: str) -> Optional[BranchResponse]:
        branch = self.branch_repo.get_main_for_document(document_id)
        return BranchResponse.model_validate(branch) if branch else None

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def create_version(self, branch_id: str, content: str, title: str) -> str:
        """Save a new version, diffed against the branch's latest one."""
        branch = self.branch_repo.get_by_id(branch_id)
        version = self._insert_version(branch, content, title)
        self.db.commit()
        logger.info(
            "Created version",
            extra={
                "branch_id": branch_id,
                "version_id": version.id,
                "diff_from_version_id": version.diff_from_version_id,
            },
        )
        return version.id

    def update_version(self, version_id: str, content: str, title: str) -> Optional[VersionResponse]:
        """Rewrite a version in place. The diff chain is left as it was."""
        version = self.version_repo.get_by_id_optional(version_id)
        if version is None:
            return None
        content_ref = self.blobs.put(BlobNamespace.VERSION, version.id, content)
        self.version_repo.update(version, title, content_ref)
        self._touch_branch(version.branch)
        self.db.commit()
        return self._version_response(version, content)

    def delete_version(self, version_id: str) -> bool:
        """Delete a version, its sections and its blobs.

        Versions diffed against it are re-pointed at its own predecessor
        (or at nothing) with a freshly computed diff.
        """
        version = self.version_repo.get_by_id_optional(version_id)
        if version is None:
            return False

        branch = version.branch
        doomed = self._blob_keys_for([version])
        for dependent in self.version_repo.list_referencing(version.id):
            doomed.extend(self._rebase_diff(dependent, version.diff_from_version_id))

        self.version_repo.delete(version)
        self._touch_branch(branch)
        self.db.commit()

        self._delete_blobs(doomed)
        logger.info("Deleted version", extra={"version_id": version_id, "blobs": len(doomed)})
        return True

    def get_version(self, version_id: str) -> Optional[VersionResponse]:
        version = self.version_repo.get_by_id_optional(version_id)
        return self._version_response(version) if version else None

    def list_versions(
        self, branch_id: str, skip: int = 0, limit: Optional[int] = None
    ) -> List[VersionResponse]:
        """Versions of a branch, newest first, content included."""
        return [self._version_response(v) for v in self.version_repo.list_by_branch(branch_id, skip, limit)]

    def get_latest_version(self, branch_id: str) -> Optional[VersionResponse]:
        version = self.version_repo.get_latest(branch_id)
        return self._version_response(version) if version else None

    def get_version_diff(self, version_id: str) -> Optional[VersionDiffResponse]:
        """Stored diff against the predecessor, if the version has one."""
        version = self.version_repo.get_by_id_optional(version_id)
        if version is None or version.diff_from_version_id is None or version.diff_ref is None:
            return None
        return VersionDiffResponse(
            version_id=version.id,
            diff_from_version_id=version.diff_from_version_id,
            diff=self.blobs.get(BlobNamespace.DIFF, PurePosixPath(version.diff_ref).stem),
        )

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def create_section(
        self,
        version_id: str,
        title: str,
        content: str,
        order: Optional[int] = None,
    ) -> str:
        """Add a section to a version; ``order=None`` appends it."""
        version = self.version_repo.get_by_id(version_id)
        if order is None:
            order = self.section_repo.next_order(version_id)
        else:
            self._check_order_free(version_id, order)

        section = self._insert_section(version.id, title, content, order)
        self._content_changed(version)
        self.db.commit()
        return section.id

    def update_section(
        self,
        section_id: str,
        title: str,
        content: str,
        order: int,
    ) -> Optional[SectionResponse]:
        section = self.section_repo.get_by_id_optional(section_id)
        if section is None:
            return None
        self._check_order_free(section.version_id, order, section_id=section.id)
        content_ref = self.blobs.put(BlobNamespace.SECTION, section.id, content)
        self.section_repo.update(section, title, content_ref, order)
        self._content_changed(section.version)
        self.db.commit()
        return self._section_response(section, content)

    def delete_section(self, section_id: str) -> bool:
        section = self.section_repo.get_by_id_optional(section_id)
        if section is None:
            return False
        version = section.version
        self.section_repo.delete(section)
        self._content_changed(version)
        self.db.commit()
        self.blobs.delete(BlobNamespace.SECTION, section_id)
        return True

    def reorder_sections(self, version_id: str, section_ids: List[str]) -> Optional[List[SectionResponse]]:
        """Renumber a version's sections 0..n-1 in the given sequence."""
        version = self.version_repo.get_by_id_optional(version_id)
        if version is None:
            return None

        by_id = {s.id: s for s in self.section_repo.list_by_version(version_id)}
        if len(section_ids) != len(by_id) or set(section_ids) != set(by_id):
            raise ValidationError(
                "section_ids must list every section of the version exactly once",
                field="section_ids",
            )
        for order, section_id in enumerate(section_ids):
            by_id[section_id].order = order
        self._content_changed(version)
        self.db.commit()
        return self.list_sections(version_id)

    def get_section(self, section_id: str) -> Optional[SectionResponse]:
        section = self.section_repo.get_by_id_optional(section_id)
        return self._section_response(section) if section else None

    def list_sections(self, version_id: str) -> List[SectionResponse]:
        return [self._section_response(s) for s in self.section_repo.list_by_version(version_id)]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _insert_version(self, branch: Branch, content: str, title: str) -> Version:
        version_id = _new_id()
        content_ref = self.blobs.put(BlobNamespace.VERSION, version_id, content)

        created_at = utcnow()
        diff_from_version_id = None
        diff_ref = None
        latest = self.version_repo.get_latest(branch.id)
        if latest is not None:
            # The predecessor must be strictly older, even on a coarse clock.
            if created_at <= latest.created_at:
                created_at = latest.created_at + timedelta(microseconds=1)
            previous = self.blobs.get(BlobNamespace.VERSION, latest.id)
            diff_ref = self.blobs.put(
                BlobNamespace.DIFF, diff_key(latest.id, version_id), self.diff(previous, content)
            )
            diff_from_version_id = latest.id

        version = self.version_repo.create(
            version_id, branch.id, title, content_ref,
            diff_from_version_id=diff_from_version_id,
            diff_ref=diff_ref,
            created_at=created_at,
        )
        self._touch_branch(branch, created_at)
        return version

    def _copy_version(self, branch: Branch, source: Version, title: str) -> Version:
        content = self.blobs.get(BlobNamespace.VERSION, source.id)
        version = self._insert_version(branch, content, title)
        for section in self.section_repo.list_by_version(source.id):
            self._insert_section(
                version.id,
                section.title,
                self.blobs.get(BlobNamespace.SECTION, section.id),
                section.order,
            )
        return version

    def _insert_section(self, version_id: str, title: str, content: str, order: int) -> Section:
        section_id = _new_id()
        content_ref = self.blobs.put(BlobNamespace.SECTION, section_id, content)
        return self.section_repo.create(section_id, version_id, title, content_ref, order)

    def _rebase_diff(self, dependent: Version, predecessor_id: Optional[str]) -> List[BlobKey]:
        """Point ``dependent`` past a version that is about to be deleted.

        Returns the blob keys that become stale.
        """
        stale: List[BlobKey] = []
        if dependent.diff_ref:
            stale.append((BlobNamespace.DIFF, PurePosixPath(dependent.diff_ref).stem))

        if predecessor_id is None:
            dependent.diff_from_version_id = None
            dependent.diff_ref = None
        else:
            previous = self.blobs.get(BlobNamespace.VERSION, predecessor_id)
            current = self.blobs.get(BlobNamespace.VERSION, dependent.id)
            dependent.diff_ref = self.blobs.put(
                BlobNamespace.DIFF, diff_key(predecessor_id, dependent.id), self.diff(previous, current)
            )
            dependent.diff_from_version_id = predecessor_id

        self.version_repo.mark_unsynced(dependent)
        return stale

    def _check_order_free(self, version_id: str, order: int, section_id: Optional[str] = None) -> None:
        clash = self.section_repo.get_by_order(version_id, order)
        if clash is not None and clash.id != section_id:
            raise ValidationError(f"Order {order} is already used in this version", field="order")

    def _content_changed(self, version: Version) -> None:
        self.version_repo.mark_unsynced(version)
        self._touch_branch(version.branch)

    def _touch_branch(self, branch: Branch, when: Optional[datetime] = None) -> None:
        when = when or utcnow()
        self.branch_repo.touch(branch, when)
        self.doc_repo.touch(branch.document, when)

    def _blob_keys_for(self, versions: List[Version]) -> List[BlobKey]:
        """Every blob owned by these versions: content, diff and sections."""
        keys: List[BlobKey] = []
        for version in versions:
            keys.append((BlobNamespace.VERSION, version.id))
            if version.diff_ref:
                keys.append((BlobNamespace.DIFF, PurePosixPath(version.diff_ref).stem))
        sections = self.section_repo.list_by_versions([v.id for v in versions])
        keys.extend((BlobNamespace.SECTION, s.id) for s in sections)
        return keys

    def _delete_blobs(self, keys: List[BlobKey]) -> None:
        for namespace, key in keys:
            self.blobs.delete(namespace, key)

    def _version_response(self, version: Version, content: Optional[str] = None) -> VersionResponse:
        if content is None:
            content = self.blobs.get(BlobNamespace.VERSION, version.id)
        return VersionResponse(
            id=version.id,
            branch_id=version.branch_id,
            number=version.number,
            title=version.title,
            content=content,
            diff_from_version_id=version.diff_from_version_id,
            created_at=version.created_at,
            is_synced_to_cloud=version.is_synced_to_cloud,
        )

    def _section_response(self, section: Section, content: Optional[str] = None) -> SectionResponse:
        if content is None:
            content = self.blobs.get(BlobNamespace.SECTION, section.id)
        return SectionResponse(
            id=section.id,
            version_id=section.version_id,
            title=section.title,
            content=content,
            order=section.order,
        )
