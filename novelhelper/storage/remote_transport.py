"""Remote object storage transport used by cloud sync.

``RemoteTransport`` is the seam the sync service talks to: three calls that
report success as a bool and never raise for ordinary transfer failures.
``MinIOTransport`` implements it against any S3-compatible endpoint.
"""

import logging
import os
from typing import Optional, Protocol

from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError

from ..core.config import Settings

logger = logging.getLogger(__name__)


class RemoteTransport(Protocol):
    """Moves single files between the local disk and a remote key space."""

    def upload(self, local_path: str, remote_key: str) -> bool:
        ...

    def download(self, remote_key: str, destination: str) -> bool:
        ...

    def delete(self, remote_key: str) -> bool:
        ...


class ObjectStorageError(Exception):
    """Raised when the object storage client cannot be set up."""
    pass


# Failures that make one transfer unsuccessful without aborting the caller.
# MinioException covers S3Error, ServerError (5xx) and InvalidResponseError;
# ValueError comes from rejected object names.
_TRANSFER_ERRORS = (MinioException, HTTPError, OSError, ValueError, ObjectStorageError)


class MinIOTransport:
    """
    RemoteTransport backed by a MinIO / S3 bucket.

    The client is created lazily and the bucket is created on first use if
    it does not exist yet.
    """

    CONTENT_TYPE = "text/plain; charset=utf-8"

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        secure: bool = False,
        region: Optional[str] = None,
    ):
        self.endpoint = endpoint
        self.access_key = access_key
        self.secret_key = secret_key
        self.bucket = bucket
        self.secure = secure
        self.region = region or None
        self._client: Optional[Minio] = None
        self._bucket_ready = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "MinIOTransport":
        return cls(
            endpoint=settings.s3_endpoint,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            bucket=settings.s3_bucket,
            secure=settings.s3_secure,
            region=settings.s3_region,
        )

    @property
    def client(self) -> Minio:
        """
        Get the MinIO client instance, creating it if necessary.

        Raises:
            ObjectStorageError: If client creation fails
        """
        if self._client is None:
            try:
                self._client = Minio(
                    endpoint=self.endpoint,
                    access_key=self.access_key,
                    secret_key=self.secret_key,
                    secure=self.secure,
                    region=self.region,
                )
            except ValueError as e:
                raise ObjectStorageError(f"Failed to create MinIO client: {e}") from e
        return self._client

    def ensure_bucket(self) -> None:
        """Create the target bucket if it does not exist yet."""
        if self._bucket_ready:
            return
        if not self.client.bucket_exists(bucket_name=self.bucket):
            logger.info("Creating bucket", extra={"bucket": self.bucket})
            if self.region:
                self.client.make_bucket(bucket_name=self.bucket, location=self.region)
            else:
                self.client.make_bucket(bucket_name=self.bucket)
        self._bucket_ready = True

    def upload(self, local_path: str, remote_key: str) -> bool:
        """Upload one file. Returns False if it is missing or the transfer fails."""
        if not os.path.isfile(local_path):
            logger.error("Upload source does not exist", extra={"path": local_path, "key": remote_key})
            return False

        try:
            self.ensure_bucket()
            self.client.fput_object(
                bucket_name=self.bucket,
                object_name=remote_key,
                file_path=local_path,
                content_type=self.CONTENT_TYPE,
            )
        except _TRANSFER_ERRORS as e:
            logger.error("Upload failed", extra={"key": remote_key, "error": str(e)})
            return False

        logger.debug("Uploaded object", extra={"bucket": self.bucket, "key": remote_key})
        return True

    def download(self, remote_key: str, destination: str) -> bool:
        """Download one object to ``destination``, creating parent directories."""
        try:
            parent = os.path.dirname(destination)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self.ensure_bucket()
            self.client.fget_object(
                bucket_name=self.bucket,
                object_name=remote_key,
                file_path=destination,
            )
        except _TRANSFER_ERRORS as e:
            logger.error("Download failed", extra={"key": remote_key, "error": str(e)})
            return False
        return True

    def delete(self, remote_key: str) -> bool:
        try:
            self.ensure_bucket()
            self.client.remove_object(bucket_name=self.bucket, object_name=remote_key)
        except _TRANSFER_ERRORS as e:
            logger.error("Delete failed", extra={"key": remote_key, "error": str(e)})
            return False
        return True
