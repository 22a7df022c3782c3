"""Services for apillon package."""
from .api_client import HTTPAPIClient, decode_json
from .ipfs import IPFSService
from .retry import RetryExecutor
from .signed_upload import SignedURLUploader
from .storage import StorageService
from .transport import HTTPTransport, RequestSpec, classify_response

__all__ = [
    "HTTPAPIClient",
    "HTTPTransport",
    "IPFSService",
    "RequestSpec",
    "RetryExecutor",
    "SignedURLUploader",
    "StorageService",
    "classify_response",
    "decode_json",
]
