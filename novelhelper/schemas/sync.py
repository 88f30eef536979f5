"""Sync progress events.

A sync run emits ``SyncStarted``, then zero or more ``SyncInProgress``,
then exactly one of ``SyncCompleted`` / ``SyncFailed``. The ``kind`` field
discriminates the union so consumers can ``match`` on it.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class SyncStarted(BaseModel):
    kind: Literal["started"] = "started"


class SyncInProgress(BaseModel):
    kind: Literal["in_progress"] = "in_progress"
    current: int
    total: int


class SyncCompleted(BaseModel):
    kind: Literal["completed"] = "completed"
    success_count: int


class SyncFailed(BaseModel):
    kind: Literal["failed"] = "failed"
    message: str


SyncProgress = Annotated[
    Union[SyncStarted, SyncInProgress, SyncCompleted, SyncFailed],
    Field(discriminator="kind"),
]

sync_progress_adapter = TypeAdapter(SyncProgress)


def parse_progress(raw: str) -> SyncProgress:
    """Parse one NDJSON line of the sync stream back into an event."""
    return sync_progress_adapter.validate_json(raw)
