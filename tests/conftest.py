"""Shared test fixtures for the NovelHelper test suite.

Every test gets its own SQLite database file and blob directory under
pytest's ``tmp_path``, so tests are isolated without any cleanup. Cloud
sync runs against ``FakeTransport`` instead of a real bucket.
"""

import os

# Human-readable logs in test output; set before any app imports.
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient

from novelhelper.core.config import Settings
from novelhelper.database import Database
from novelhelper.main import create_app
from novelhelper.services.document_service import DocumentService
from novelhelper.storage.blob_store import BlobStore


class FakeTransport:
    """In-memory RemoteTransport.

    Uploads copy the local file's text into ``objects``. Keys listed in
    ``fail_keys`` are rejected; ``raise_on`` makes the matching upload raise.
    """

    def __init__(self):
        self.objects: dict = {}
        self.uploads: list = []
        self.fail_keys: set = set()
        self.raise_on: dict = {}

    def upload(self, local_path: str, remote_key: str) -> bool:
        self.uploads.append(remote_key)
        if remote_key in self.raise_on:
            raise self.raise_on[remote_key]
        if remote_key in self.fail_keys or not os.path.isfile(local_path):
            return False
        with open(local_path, encoding="utf-8", newline="") as fh:
            self.objects[remote_key] = fh.read()
        return True

    def download(self, remote_key: str, destination: str) -> bool:
        if remote_key not in self.objects:
            return False
        with open(destination, "w", encoding="utf-8", newline="") as fh:
            fh.write(self.objects[remote_key])
        return True

    def delete(self, remote_key: str) -> bool:
        return self.objects.pop(remote_key, None) is not None


@pytest.fixture()
def database(tmp_path):
    """Fresh SQLite database with all tables created."""
    database = Database(f"sqlite:///{tmp_path / 'test.db'}")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture()
def db(database):
    """Per-test database session."""
    session = database.session()
    yield session
    session.close()


@pytest.fixture()
def blob_store(tmp_path) -> BlobStore:
    return BlobStore(tmp_path / "content")


@pytest.fixture()
def service(db, blob_store) -> DocumentService:
    return DocumentService(db, blob_store)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def client(tmp_path, transport):
    """TestClient for an app wired to a temporary database and blob store."""
    settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        content_dir=str(tmp_path / "api-content"),
        log_format="text",
    )
    app = create_app(settings, transport=transport)
    with TestClient(app) as c:
        yield c


def make_document(
    title: str = "Test Document",
    author_id: str = "author-1",
    synopsis: str = "A short synopsis.",
    **overrides,
) -> dict:
    """Factory for document creation payloads."""
    payload = {
        "title": title,
        "author_id": author_id,
        "synopsis": synopsis,
    }
    payload.update(overrides)
    return payload
