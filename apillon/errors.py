"""
Error taxonomy for Apillon storage operations.

Every error raised by the package is an ApillonError subclass. Errors keep
their kind as they cross layers; context (phase, bucket, file) is attached
with with_context() instead of wrapping.
"""
from typing import Any, Optional


# Application status codes with a dedicated error kind
DIRECTORY_NOT_FOUND = 40406003
DIRECTORY_DELETING = 40006007


class ApillonError(Exception):
    """Base exception for Apillon client errors."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        phase: Optional[str] = None,
        bucket_uuid: Optional[str] = None,
        file_index: Optional[int] = None,
        file_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.phase = phase
        self.bucket_uuid = bucket_uuid
        self.file_index = file_index
        self.file_name = file_name

    def with_context(self, **context: Any) -> "ApillonError":
        """Fill in context fields that are not set yet; returns self."""
        for key, value in context.items():
            if not hasattr(self, key):
                raise AttributeError(f"unknown error context field: {key}")
            if getattr(self, key) is None:
                setattr(self, key, value)
        return self

    @property
    def context(self) -> dict:
        return {
            key: value
            for key, value in (
                ("phase", self.phase),
                ("bucket", self.bucket_uuid),
                ("file_index", self.file_index),
                ("file", self.file_name),
            )
            if value is not None
        }

    def __str__(self) -> str:
        text = self.message
        if self.status is not None:
            text = f"{text} (status {self.status})"
        ctx = self.context
        if ctx:
            details = ", ".join(f"{k}={v}" for k, v in ctx.items())
            text = f"{text} [{details}]"
        return text


class InvalidInputError(ApillonError):
    """Caller arguments failed a precondition; raised before any request."""


class TransportError(ApillonError):
    """Connectivity/timeout failure or an undecodable error response. Retryable."""

    def __init__(self, message: str, *, body: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.body = body


class RetryExhaustedError(TransportError):
    """All attempts failed with TransportError; __cause__ is the last failure."""

    def __init__(self, message: str, *, attempts: int, **kwargs):
        super().__init__(message, **kwargs)
        self.attempts = attempts


class ApplicationError(ApillonError):
    """Structured {status, message} error reported by the API. Terminal."""


class NotFoundError(ApplicationError):
    """Lookup succeeded but returned nothing."""


class DirectoryNotFoundError(ApplicationError):
    """Directory does not exist."""


class DirectoryDeletingError(ApplicationError):
    """Directory is already marked for deletion."""


class ProtocolViolationError(ApillonError):
    """A successful response broke the API contract (malformed body, missing URLs)."""


class UpstreamUploadError(ApillonError):
    """Signed-URL storage endpoint rejected an upload with a non-2xx status."""

    def __init__(self, message: str, *, body: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.body = body
