"""Custom exception hierarchy for NovelHelper."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    BRANCH_NOT_FOUND = "BRANCH_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    SECTION_NOT_FOUND = "SECTION_NOT_FOUND"

    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Flat-file content storage
    BLOB_STORE_ERROR = "BLOB_STORE_ERROR"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class NovelHelperException(Exception):
    """
    Base exception for all NovelHelper errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class DocumentNotFoundError(NovelHelperException):
    """Document not found in database."""

    def __init__(self, doc_id: str):
        super().__init__(
            f"Document not found: {doc_id}",
            ErrorCode.DOCUMENT_NOT_FOUND,
            status_code=404,
            details={"doc_id": doc_id}
        )


class BranchNotFoundError(NovelHelperException):
    """Branch not found in database."""

    def __init__(self, branch_id: str):
        super().__init__(
            f"Branch not found: {branch_id}",
            ErrorCode.BRANCH_NOT_FOUND,
            status_code=404,
            details={"branch_id": branch_id}
        )


class VersionNotFoundError(NovelHelperException):
    """Version not found in database."""

    def __init__(self, version_id: str):
        super().__init__(
            f"Version not found: {version_id}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"version_id": version_id}
        )


class SectionNotFoundError(NovelHelperException):
    """Section not found in database."""

    def __init__(self, section_id: str):
        super().__init__(
            f"Section not found: {section_id}",
            ErrorCode.SECTION_NOT_FOUND,
            status_code=404,
            details={"section_id": section_id}
        )


class ValidationError(NovelHelperException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class BlobStoreError(NovelHelperException):
    """Reading, writing or deleting a content file failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.BLOB_STORE_ERROR,
            status_code=500,
            details=details
        )
