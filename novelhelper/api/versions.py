"""Version API endpoints and the sections of a version."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ..exceptions import VersionNotFoundError
from ..schemas.section import SectionCreate, SectionReorder, SectionResponse
from ..schemas.version import VersionDiffResponse, VersionResponse, VersionUpdate
from ..services import DocumentService
from .deps import get_document_service

router = APIRouter(prefix="/api/versions", tags=["versions"])


@router.get("/{version_id}", response_model=VersionResponse)
def get_version(version_id: str, service: DocumentService = Depends(get_document_service)):
    version = service.get_version(version_id)
    if version is None:
        raise VersionNotFoundError(version_id)
    return version


@router.put("/{version_id}", response_model=VersionResponse)
def update_version(
    version_id: str,
    version: VersionUpdate,
    service: DocumentService = Depends(get_document_service),
):
    """Overwrite a version's content and title in place."""
    updated = service.update_version(version_id, version.content, version.title)
    if updated is None:
        raise VersionNotFoundError(version_id)
    return updated


@router.delete("/{version_id}", status_code=204)
def delete_version(version_id: str, service: DocumentService = Depends(get_document_service)):
    if not service.delete_version(version_id):
        raise VersionNotFoundError(version_id)
    return Response(status_code=204)


@router.get("/{version_id}/diff", response_model=VersionDiffResponse)
def get_version_diff(version_id: str, service: DocumentService = Depends(get_document_service)):
    """Unified diff from the previous version of the branch."""
    if service.get_version(version_id) is None:
        raise VersionNotFoundError(version_id)
    diff = service.get_version_diff(version_id)
    if diff is None:
        raise HTTPException(status_code=404, detail="Version has no predecessor")
    return diff


@router.get("/{version_id}/sections", response_model=List[SectionResponse])
def list_sections(version_id: str, service: DocumentService = Depends(get_document_service)):
    if service.get_version(version_id) is None:
        raise VersionNotFoundError(version_id)
    return service.list_sections(version_id)


@router.post("/{version_id}/sections", response_model=SectionResponse, status_code=201)
def create_section(
    version_id: str,
    section: SectionCreate,
    service: DocumentService = Depends(get_document_service),
):
    """Add a section; without an explicit order it goes after the last one."""
    section_id = service.create_section(version_id, section.title, section.content, section.order)
    return service.get_section(section_id)


@router.put("/{version_id}/sections/order", response_model=List[SectionResponse])
def reorder_sections(
    version_id: str,
    reorder: SectionReorder,
    service: DocumentService = Depends(get_document_service),
):
    sections = service.reorder_sections(version_id, reorder.section_ids)
    if sections is None:
        raise VersionNotFoundError(version_id)
    return sections
