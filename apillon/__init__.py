"""
Apillon - async client for the Apillon storage API.

Usage:
    from apillon import StorageClient, UploadFile

    async with StorageClient(api_key) as client:
        bucket = await client.create_bucket("docs", "project documents")

        # Session upload: signed URLs are fetched, files are PUT directly
        # to storage, then the session is closed
        result = await client.upload_files(bucket.bucket_uuid, [
            UploadFile("readme.txt", b"hello"),
            UploadFile.from_path("report.pdf", path="reports/"),
        ])

The API key may be omitted, in which case APILLON_API_KEY is read once
when the client is constructed.
"""
from .client import StorageClient
from .config import ClientConfig
from .errors import (
    ApillonError,
    ApplicationError,
    DirectoryDeletingError,
    DirectoryNotFoundError,
    InvalidInputError,
    NotFoundError,
    ProtocolViolationError,
    RetryExhaustedError,
    TransportError,
    UpstreamUploadError,
)
from .models import (
    Bucket,
    BucketContent,
    BucketContentItem,
    BucketList,
    DeleteDirectoryResult,
    FileList,
    FileMetadata,
    IPFSClusterInfo,
    StartUploadResult,
    StorageFile,
    UploadFile,
)
from .orchestrator import SessionUploadHandler, UploadSession, UploadState

__version__ = "0.1.0"
__all__ = [
    # Main
    "StorageClient",
    "ClientConfig",
    "SessionUploadHandler",
    "UploadSession",
    "UploadState",
    # Models
    "Bucket",
    "BucketContent",
    "BucketContentItem",
    "BucketList",
    "DeleteDirectoryResult",
    "FileList",
    "FileMetadata",
    "IPFSClusterInfo",
    "StartUploadResult",
    "StorageFile",
    "UploadFile",
    # Errors
    "ApillonError",
    "ApplicationError",
    "DirectoryDeletingError",
    "DirectoryNotFoundError",
    "InvalidInputError",
    "NotFoundError",
    "ProtocolViolationError",
    "RetryExhaustedError",
    "TransportError",
    "UpstreamUploadError",
]
