"""Tests for SyncService.sync_to_cloud progress streams."""

from unittest.mock import MagicMock, patch

from minio.error import InvalidResponseError, ServerError

from novelhelper.repositories import VersionRepository
from novelhelper.schemas.sync import SyncCompleted, SyncFailed, SyncInProgress, SyncStarted
from novelhelper.services.document_service import DocumentService
from novelhelper.services.sync_service import (
    SyncService,
    section_content_key,
    version_content_key,
    version_diff_key,
)
from novelhelper.storage.remote_transport import MinIOTransport


def _three_versions(service):
    """One document with three saved versions on its main branch."""
    doc_id = service.create_document("Draft", "author-1")
    branch_id = service.get_main_branch(doc_id).id
    return [service.create_version(branch_id, f"text {i}\n", f"v{i}") for i in range(1, 4)]


def _run(db, blob_store, transport) -> list:
    return list(SyncService(db, blob_store, transport).sync_to_cloud())


class TestSyncProgress:

    def test_nothing_to_sync(self, db, blob_store, transport):
        events = _run(db, blob_store, transport)
        assert events == [SyncStarted(), SyncCompleted(success_count=0)]
        assert transport.uploads == []

    def test_all_items_succeed(self, db, service, blob_store, transport):
        version_ids = _three_versions(service)

        events = _run(db, blob_store, transport)

        assert events == [
            SyncStarted(),
            SyncInProgress(current=1, total=3),
            SyncInProgress(current=2, total=3),
            SyncInProgress(current=3, total=3),
            SyncCompleted(success_count=3),
        ]
        for version_id in version_ids:
            assert service.get_version(version_id).is_synced_to_cloud is True

    def test_second_run_has_nothing_left(self, db, service, blob_store, transport):
        _three_versions(service)
        _run(db, blob_store, transport)
        assert _run(db, blob_store, transport) == [SyncStarted(), SyncCompleted(success_count=0)]

    def test_failed_upload_is_skipped(self, db, service, blob_store, transport):
        v1, v2, v3 = _three_versions(service)
        transport.fail_keys.add(version_content_key(v2))

        events = _run(db, blob_store, transport)

        assert events[-1] == SyncCompleted(success_count=2)
        assert service.get_version(v2).is_synced_to_cloud is False
        assert service.get_version(v1).is_synced_to_cloud is True
        assert service.get_version(v3).is_synced_to_cloud is True

    def test_failed_item_is_retried_next_run(self, db, service, blob_store, transport):
        _, v2, _ = _three_versions(service)
        transport.fail_keys.add(version_content_key(v2))
        _run(db, blob_store, transport)

        transport.fail_keys.clear()
        events = _run(db, blob_store, transport)

        assert events == [
            SyncStarted(),
            SyncInProgress(current=1, total=1),
            SyncCompleted(success_count=1),
        ]
        assert service.get_version(v2).is_synced_to_cloud is True

    def test_exception_ends_with_failed(self, db, service, blob_store, transport):
        v1, v2, _ = _three_versions(service)
        transport.raise_on[version_content_key(v2)] = RuntimeError("connection reset")

        events = _run(db, blob_store, transport)

        assert events[-1] == SyncFailed(message="connection reset")
        assert SyncCompleted not in [type(e) for e in events]
        # Items before the failure keep their committed flag.
        assert service.get_version(v1).is_synced_to_cloud is True
        assert service.get_version(v2).is_synced_to_cloud is False

    def test_exception_without_message(self, db, service, blob_store, transport):
        v1, _, _ = _three_versions(service)
        transport.raise_on[version_content_key(v1)] = RuntimeError()
        assert _run(db, blob_store, transport)[-1] == SyncFailed(message="Unknown error")

    def test_progress_is_monotonic(self, db, service, blob_store, transport):
        _three_versions(service)
        currents = [e.current for e in _run(db, blob_store, transport) if isinstance(e, SyncInProgress)]
        assert currents == sorted(currents)
        assert currents[-1] == 3


class TestSyncUploads:

    def test_uploads_content_diff_and_sections(self, db, service, blob_store, transport):
        doc_id = service.create_document("Draft", "author-1")
        branch_id = service.get_main_branch(doc_id).id
        first = service.create_version(branch_id, "Hello", "v1")
        second = service.create_version(branch_id, "Hello world", "v2")
        section_id = service.create_section(second, "Chapter 1", "It was dark.")

        _run(db, blob_store, transport)

        assert transport.objects[version_content_key(first)] == "Hello"
        assert transport.objects[version_content_key(second)] == "Hello world"
        assert version_diff_key(first, second) in transport.objects
        assert transport.objects[section_content_key(second, section_id)] == "It was dark."
        # The first version has no predecessor, so no diff is uploaded for it.
        assert not any(key.endswith(f"_{first}") for key in transport.objects)

    def test_failed_section_upload_fails_the_item(self, db, service, blob_store, transport):
        doc_id = service.create_document("Draft", "author-1")
        version_id = service.create_version(service.get_main_branch(doc_id).id, "text", "v1")
        section_id = service.create_section(version_id, "One", "1")
        transport.fail_keys.add(section_content_key(version_id, section_id))

        events = _run(db, blob_store, transport)

        assert events[-1] == SyncCompleted(success_count=0)
        assert VersionRepository(db).list_unsynced()[0].id == version_id

    def test_remote_key_layout(self):
        assert version_content_key("v2") == "versions/v2/content"
        assert version_diff_key("v1", "v2") == "versions/diffs/v1_v2"
        assert section_content_key("v2", "s1") == "versions/v2/sections/s1"

    def test_closing_the_stream_stops_between_items(self, db, service, blob_store, transport):
        _three_versions(service)
        stream = SyncService(db, blob_store, transport).sync_to_cloud()

        assert next(stream) == SyncStarted()
        assert next(stream) == SyncInProgress(current=1, total=3)
        stream.close()

        assert transport.uploads == []
        assert len(VersionRepository(db).list_unsynced()) == 3

    def test_version_deleted_mid_run_is_skipped(self, database, db, service, blob_store, transport):
        v1, v2, v3 = _three_versions(service)
        stream = SyncService(db, blob_store, transport).sync_to_cloud()
        assert next(stream) == SyncStarted()
        assert next(stream) == SyncInProgress(current=1, total=3)
        assert next(stream) == SyncInProgress(current=2, total=3)

        # Another request deletes v2 on its own session while the stream is paused.
        other = database.session()
        try:
            assert DocumentService(other, blob_store).delete_version(v2) is True
        finally:
            other.close()

        assert list(stream) == [
            SyncInProgress(current=3, total=3),
            SyncCompleted(success_count=2),
        ]
        assert version_content_key(v2) not in transport.uploads
        assert service.get_version(v1).is_synced_to_cloud is True
        assert service.get_version(v3).is_synced_to_cloud is True


class TestSyncWithMinIO:

    @patch("novelhelper.storage.remote_transport.Minio")
    def test_server_errors_fail_only_their_item(self, mock_minio_class, db, service, blob_store):
        v1, v2, v3 = _three_versions(service)
        failing = {
            version_content_key(v2): InvalidResponseError(502, "text/html", "<html>Bad Gateway</html>"),
        }

        def fput_object(bucket_name, object_name, file_path, content_type):
            if object_name in failing:
                raise failing[object_name]

        mock_client = MagicMock()
        mock_client.fput_object.side_effect = fput_object
        mock_minio_class.return_value = mock_client
        transport = MinIOTransport("localhost:9000", "access_key", "secret_key", "novel-helper-app")

        events = _run(db, blob_store, transport)

        assert events == [
            SyncStarted(),
            SyncInProgress(current=1, total=3),
            SyncInProgress(current=2, total=3),
            SyncInProgress(current=3, total=3),
            SyncCompleted(success_count=2),
        ]
        assert service.get_version(v2).is_synced_to_cloud is False
        assert service.get_version(v3).is_synced_to_cloud is True

    @patch("novelhelper.storage.remote_transport.Minio")
    def test_5xx_on_every_upload_completes_with_zero(self, mock_minio_class, db, service, blob_store):
        _three_versions(service)
        mock_client = MagicMock()
        mock_client.fput_object.side_effect = ServerError("server failed with HTTP status code 503", 503)
        mock_minio_class.return_value = mock_client
        transport = MinIOTransport("localhost:9000", "access_key", "secret_key", "novel-helper-app")

        events = _run(db, blob_store, transport)

        assert events[-1] == SyncCompleted(success_count=0)
        assert len(VersionRepository(db).list_unsynced()) == 3
