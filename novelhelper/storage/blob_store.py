"""Flat-file blob store for version, section and diff text.

Each blob is one UTF-8 file named after its key inside a per-namespace
directory. Locators handed back by ``put`` are POSIX paths relative to the
store root, so the metadata rows survive moving the content directory.
"""

import logging
import os
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Union

from ..exceptions import BlobStoreError, ValidationError

logger = logging.getLogger(__name__)


class BlobNamespace(str, Enum):
    """Kind of content a blob holds; doubles as its directory name."""
    VERSION = "versions"
    SECTION = "sections"
    DIFF = "diffs"


_EXTENSIONS = {
    BlobNamespace.VERSION: ".txt",
    BlobNamespace.SECTION: ".txt",
    BlobNamespace.DIFF: ".diff",
}


def diff_key(from_version_id: str, to_version_id: str) -> str:
    """Key of the diff blob between two versions."""
    return f"{from_version_id}_{to_version_id}"


def _validate_key(key: str) -> None:
    if not key or key in (".", "..") or "/" in key or "\\" in key or "\x00" in key:
        raise ValidationError(f"Invalid blob key: {key!r}", field="key")


class BlobStore:
    """Key → text storage on the local filesystem.

    ``get`` on a missing key returns an empty string rather than raising.
    Any other filesystem failure surfaces as ``BlobStoreError``.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def path(self, namespace: BlobNamespace, key: str) -> Path:
        """Absolute path of the file backing ``key``."""
        _validate_key(key)
        return self.root / namespace.value / f"{key}{_EXTENSIONS[namespace]}"

    def resolve(self, locator: str) -> Path:
        """Turn a stored locator back into an absolute path inside the root."""
        relative = PurePosixPath(locator)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValidationError(f"Invalid blob locator: {locator!r}", field="locator")
        return self.root.joinpath(*relative.parts)

    def exists(self, namespace: BlobNamespace, key: str) -> bool:
        return self.path(namespace, key).is_file()

    def put(self, namespace: BlobNamespace, key: str, text: str) -> str:
        """Write ``text`` under ``key``, replacing any previous content.

        Returns:
            The locator to store in the metadata row.
        """
        target = self.path(namespace, key)
        tmp = target.with_name(target.name + ".tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # newline="" keeps \r\n and lone \r exactly as given
            with open(tmp, "w", encoding="utf-8", newline="") as fh:
                fh.write(text)
            os.replace(tmp, target)
        except OSError as e:
            raise BlobStoreError(f"Failed to write blob {namespace.value}/{key}", e) from e

        logger.debug("Wrote blob", extra={"namespace": namespace.value, "key": key, "chars": len(text)})
        return target.relative_to(self.root).as_posix()

    def get(self, namespace: BlobNamespace, key: str) -> str:
        """Read the text stored under ``key``; ``""`` if there is none."""
        target = self.path(namespace, key)
        try:
            with open(target, "r", encoding="utf-8", newline="") as fh:
                return fh.read()
        except FileNotFoundError:
            return ""
        except OSError as e:
            raise BlobStoreError(f"Failed to read blob {namespace.value}/{key}", e) from e

    def delete(self, namespace: BlobNamespace, key: str) -> bool:
        """Remove the blob. Returns False when it did not exist."""
        target = self.path(namespace, key)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise BlobStoreError(f"Failed to delete blob {namespace.value}/{key}", e) from e

        logger.debug("Deleted blob", extra={"namespace": namespace.value, "key": key})
        return True
