"""Section API endpoints."""

from fastapi import APIRouter, Depends, Response

from ..exceptions import SectionNotFoundError
from ..schemas.section import SectionResponse, SectionUpdate
from ..services import DocumentService
from .deps import get_document_service

router = APIRouter(prefix="/api/sections", tags=["sections"])


@router.get("/{section_id}", response_model=SectionResponse)
def get_section(section_id: str, service: DocumentService = Depends(get_document_service)):
    section = service.get_section(section_id)
    if section is None:
        raise SectionNotFoundError(section_id)
    return section


@router.put("/{section_id}", response_model=SectionResponse)
def update_section(
    section_id: str,
    section: SectionUpdate,
    service: DocumentService = Depends(get_document_service),
):
    updated = service.update_section(section_id, section.title, section.content, section.order)
    if updated is None:
        raise SectionNotFoundError(section_id)
    return updated


@router.delete("/{section_id}", status_code=204)
def delete_section(section_id: str, service: DocumentService = Depends(get_document_service)):
    if not service.delete_section(section_id):
        raise SectionNotFoundError(section_id)
    return Response(status_code=204)
