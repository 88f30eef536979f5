"""Branch API endpoints and the versions saved on a branch."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..exceptions import BranchNotFoundError
from ..schemas.branch import BranchResponse, BranchUpdate
from ..schemas.version import VersionCreate, VersionResponse
from ..services import DocumentService
from .deps import get_document_service

router = APIRouter(prefix="/api/branches", tags=["branches"])


def _require_branch(service: DocumentService, branch_id: str) -> BranchResponse:
    branch = service.get_branch(branch_id)
    if branch is None:
        raise BranchNotFoundError(branch_id)
    return branch


@router.get("/{branch_id}", response_model=BranchResponse)
def get_branch(branch_id: str, service: DocumentService = Depends(get_document_service)):
    return _require_branch(service, branch_id)


@router.put("/{branch_id}", response_model=BranchResponse)
def rename_branch(
    branch_id: str,
    branch: BranchUpdate,
    service: DocumentService = Depends(get_document_service),
):
    updated = service.update_branch(branch_id, branch.name)
    if updated is None:
        raise BranchNotFoundError(branch_id)
    return updated


@router.delete("/{branch_id}", status_code=204)
def delete_branch(branch_id: str, service: DocumentService = Depends(get_document_service)):
    """Delete a branch and its versions. A deleted main branch hands the role on."""
    if not service.delete_branch(branch_id):
        raise BranchNotFoundError(branch_id)
    return Response(status_code=204)


@router.post("/{branch_id}/main", response_model=BranchResponse)
def set_main_branch(branch_id: str, service: DocumentService = Depends(get_document_service)):
    """Make this the document's main branch."""
    branch = service.set_main_branch(branch_id)
    if branch is None:
        raise BranchNotFoundError(branch_id)
    return branch


@router.get("/{branch_id}/versions", response_model=List[VersionResponse])
def list_versions(
    branch_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    service: DocumentService = Depends(get_document_service),
):
    """List versions of a branch, newest first."""
    _require_branch(service, branch_id)
    return service.list_versions(branch_id, skip, limit)


@router.post("/{branch_id}/versions", response_model=VersionResponse, status_code=201)
def create_version(
    branch_id: str,
    version: VersionCreate,
    service: DocumentService = Depends(get_document_service),
):
    """Save the branch's current content as a new version."""
    version_id = service.create_version(branch_id, version.content, version.title)
    return service.get_version(version_id)


@router.get("/{branch_id}/versions/latest", response_model=VersionResponse)
def get_latest_version(branch_id: str, service: DocumentService = Depends(get_document_service)):
    _require_branch(service, branch_id)
    version = service.get_latest_version(branch_id)
    if version is None:
        raise HTTPException(status_code=404, detail="No versions found")
    return version
