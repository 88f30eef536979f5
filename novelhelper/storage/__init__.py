"""Local blob storage and remote object transport."""

from .blob_store import BlobNamespace, BlobStore, diff_key
from .remote_transport import MinIOTransport, ObjectStorageError, RemoteTransport

__all__ = [
    "BlobNamespace",
    "BlobStore",
    "diff_key",
    "MinIOTransport",
    "ObjectStorageError",
    "RemoteTransport",
]
