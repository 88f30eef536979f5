"""Cloud sync endpoint.

Streams progress as newline-delimited JSON, one event per line, until the
run completes or fails. Closing the connection stops the run after the item
in flight.
"""

import logging
from typing import Iterator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from ..services import SyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sync", tags=["sync"])


def _progress_lines(request: Request) -> Iterator[str]:
    # The stream outlives the request's dependencies, so it owns its session.
    state = request.app.state
    db = state.database.session()
    try:
        service = SyncService(db, state.blob_store, state.transport)
        for event in service.sync_to_cloud():
            yield event.model_dump_json() + "\n"
    finally:
        db.close()


@router.post("")
def sync_to_cloud(request: Request):
    """Upload every unsynced version to object storage."""
    logger.info("Cloud sync requested")
    return StreamingResponse(_progress_lines(request), media_type="application/x-ndjson")
