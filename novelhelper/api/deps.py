"""Shared FastAPI dependencies for the route modules."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import DocumentService
from ..storage.blob_store import BlobStore


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_document_service(
    db: Session = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
) -> DocumentService:
    return DocumentService(db, blobs)
