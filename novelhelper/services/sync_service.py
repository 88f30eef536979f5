"""Cloud sync: push unsynced versions to remote object storage.

``sync_to_cloud`` is a generator of progress events. Each version is one
sync item: its content blob, its diff blob (when it has a predecessor) and
every section blob. An item counts as synced only when all of its uploads
succeed, and its flag is committed right away so an interrupted run keeps
the progress it made.
"""

import logging
from typing import Iterator

from sqlalchemy.orm import Session

from ..models import Version
from ..repositories import SectionRepository, VersionRepository
from ..schemas.sync import SyncCompleted, SyncFailed, SyncInProgress, SyncProgress, SyncStarted
from ..storage.blob_store import BlobStore
from ..storage.remote_transport import RemoteTransport

logger = logging.getLogger(__name__)


def version_content_key(version_id: str) -> str:
    return f"versions/{version_id}/content"


def version_diff_key(from_version_id: str, version_id: str) -> str:
    return f"versions/diffs/{from_version_id}_{version_id}"


def section_content_key(version_id: str, section_id: str) -> str:
    return f"versions/{version_id}/sections/{section_id}"


class SyncService:
    """Uploads every unsynced version through a ``RemoteTransport``."""

    def __init__(self, db: Session, blobs: BlobStore, transport: RemoteTransport):
        self.db = db
        self.blobs = blobs
        self.transport = transport
        self.version_repo = VersionRepository(db)
        self.section_repo = SectionRepository(db)

    def sync_to_cloud(self) -> Iterator[SyncProgress]:
        """Run one sync pass.

        Yields ``SyncStarted``, one ``SyncInProgress`` per item (before it is
        attempted), then ``SyncCompleted`` with the number of items synced.
        An item the transport rejects is logged and skipped, as is one deleted
        since the run started. Any other error ends the run with
        ``SyncFailed``; items already committed stay synced.
        """
        yield SyncStarted()

        success_count = 0
        try:
            # Ids only: rows may be deleted by other sessions while the run is going.
            pending = [version.id for version in self.version_repo.list_unsynced()]
            total = len(pending)
            logger.info("Sync started", extra={"pending": total})

            for index, version_id in enumerate(pending, start=1):
                yield SyncInProgress(current=index, total=total)
                version = self.version_repo.get_by_id_optional(version_id)
                if version is None:
                    logger.info("Sync item deleted before upload", extra={"version_id": version_id})
                    continue
                if self._upload_version(version):
                    self.version_repo.mark_synced(version_id)
                    self.db.commit()
                    success_count += 1
                else:
                    logger.warning("Sync item failed", extra={"version_id": version_id})
        except Exception as e:
            self.db.rollback()
            logger.error("Sync failed", extra={"error": str(e)}, exc_info=True)
            yield SyncFailed(message=str(e) or "Unknown error")
            return

        logger.info("Sync completed", extra={"success_count": success_count})
        yield SyncCompleted(success_count=success_count)

    def _upload_version(self, version: Version) -> bool:
        uploads = [(version.content_ref, version_content_key(version.id))]
        if version.diff_from_version_id and version.diff_ref:
            uploads.append(
                (version.diff_ref, version_diff_key(version.diff_from_version_id, version.id))
            )
        for section in self.section_repo.list_by_version(version.id):
            uploads.append((section.content_ref, section_content_key(version.id, section.id)))

        # Stops at the first rejected upload; the item is retried next run.
        return all(
            self.transport.upload(str(self.blobs.resolve(locator)), remote_key)
            for locator, remote_key in uploads
        )
