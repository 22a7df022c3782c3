"""
Protocols (Interfaces) for Dependency Inversion.

Small, focused interfaces so services and the upload handler can be
exercised with fakes.
"""
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for authenticated API operations. Returns raw response bytes."""

    async def get(self, path: str, params: Optional[Mapping[str, str]] = None) -> bytes:
        """GET request to API."""
        ...

    async def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> bytes:
        """POST request to API."""
        ...

    async def delete(self, path: str) -> bytes:
        """DELETE request to API."""
        ...


@runtime_checkable
class ISignedUploader(Protocol):
    """Interface for direct writes to pre-signed storage URLs."""

    async def put(self, url: str, content: bytes) -> None:
        """Upload raw bytes; raises on non-2xx."""
        ...
