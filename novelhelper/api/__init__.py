"""API routes."""

from .documents import router as documents_router
from .branches import router as branches_router
from .versions import router as versions_router
from .sections import router as sections_router
from .sync import router as sync_router

__all__ = [
    "documents_router",
    "branches_router",
    "versions_router",
    "sections_router",
    "sync_router",
]
