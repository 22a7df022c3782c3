"""
Signed URL uploads.

Raw bytes are PUT straight to the storage endpoint. The URL carries its own
authorization, so no API credentials are sent. No retries.
"""
import logging
from typing import Optional

import httpx

from ..errors import InvalidInputError, TransportError, UpstreamUploadError

logger = logging.getLogger(__name__)


class SignedURLUploader:
    """
    Unauthenticated PUT client.

    Implements ISignedUploader protocol.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # None keeps httpx's default timeout
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        if self._timeout is None:
            self._client = httpx.AsyncClient(transport=self._transport)
        else:
            self._client = httpx.AsyncClient(transport=self._transport, timeout=self._timeout)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def put(self, url: str, content: bytes) -> None:
        if not self._client:
            raise RuntimeError("SignedURLUploader not initialized. Use 'async with' context.")
        if not url:
            raise InvalidInputError("signed URL cannot be empty")
        if not content:
            raise InvalidInputError("file content cannot be empty")

        try:
            response = await self._client.put(url, content=content)
        except httpx.RequestError as exc:
            raise TransportError(f"upload to signed URL failed: {exc!r}") from exc

        if not 200 <= response.status_code < 300:
            body = response.text
            raise UpstreamUploadError(
                f"upload failed: {body}", status=response.status_code, body=body
            )
        logger.debug("Uploaded %d bytes (%s)", len(content), response.status_code)
