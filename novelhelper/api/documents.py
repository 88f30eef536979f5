"""Document API endpoints, including the branches of a document."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..exceptions import DocumentNotFoundError
from ..schemas.branch import BranchCreate, BranchResponse
from ..schemas.document import DocumentCreate, DocumentDetailResponse, DocumentResponse, DocumentUpdate
from ..services import DocumentService
from .deps import get_document_service

router = APIRouter(prefix="/api/docs", tags=["documents"])


@router.post("", response_model=DocumentDetailResponse, status_code=201)
def create_document(
    doc: DocumentCreate,
    service: DocumentService = Depends(get_document_service),
):
    """Create a new document with an empty main branch."""
    doc_id = service.create_document(
        title=doc.title,
        author_id=doc.author_id,
        synopsis=doc.synopsis,
        cover_image_path=doc.cover_image_path,
    )
    return service.get_document(doc_id)


@router.get("", response_model=List[DocumentResponse])
def list_documents(
    q: Optional[str] = Query(None, description="Case-insensitive title filter"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: DocumentService = Depends(get_document_service),
):
    """List documents, most recently updated first, or search them by title."""
    if q is not None:
        return service.search_documents(q, limit)
    return service.list_documents(skip, limit)


@router.get("/{doc_id}", response_model=DocumentDetailResponse)
def get_document(doc_id: str, service: DocumentService = Depends(get_document_service)):
    doc = service.get_document(doc_id)
    if doc is None:
        raise DocumentNotFoundError(doc_id)
    return doc


@router.put("/{doc_id}", response_model=DocumentResponse)
def update_document(
    doc_id: str,
    doc: DocumentUpdate,
    service: DocumentService = Depends(get_document_service),
):
    """Replace a document's title, synopsis and cover image."""
    updated = service.update_document(doc_id, doc.title, doc.synopsis, doc.cover_image_path)
    if updated is None:
        raise DocumentNotFoundError(doc_id)
    return updated


@router.delete("/{doc_id}", status_code=204)
def delete_document(doc_id: str, service: DocumentService = Depends(get_document_service)):
    """Delete a document with all of its branches, versions and content."""
    if not service.delete_document(doc_id):
        raise DocumentNotFoundError(doc_id)
    return Response(status_code=204)


@router.get("/{doc_id}/branches", response_model=List[BranchResponse])
def list_branches(doc_id: str, service: DocumentService = Depends(get_document_service)):
    if service.get_document(doc_id) is None:
        raise DocumentNotFoundError(doc_id)
    return service.list_branches(doc_id)


@router.post("/{doc_id}/branches", response_model=BranchResponse, status_code=201)
def create_branch(
    doc_id: str,
    branch: BranchCreate,
    service: DocumentService = Depends(get_document_service),
):
    """Create a branch, optionally seeded from text or from an existing version."""
    branch_id = service.create_branch(
        document_id=doc_id,
        name=branch.name,
        is_main_branch=branch.is_main_branch,
        source_content=branch.source_content,
        source_version_id=branch.source_version_id,
        version_title=branch.version_title,
    )
    return service.get_branch(branch_id)


@router.get("/{doc_id}/branches/main", response_model=BranchResponse)
def get_main_branch(doc_id: str, service: DocumentService = Depends(get_document_service)):
    if service.get_document(doc_id) is None:
        raise DocumentNotFoundError(doc_id)
    branch = service.get_main_branch(doc_id)
    if branch is None:
        raise HTTPException(status_code=404, detail="No main branch")
    return branch
