"""
Transport - Single Responsibility: one authenticated HTTP call.

Builds the URL, attaches credentials, executes exactly one request and
classifies the response. No retries happen here.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import httpx

from ..config import ClientConfig
from ..errors import ApplicationError, TransportError

logger = logging.getLogger(__name__)

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH"})
JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class RequestSpec:
    """A single API request. Built fresh per call."""
    method: str
    path: str
    params: Mapping[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None
    timeout: Optional[float] = None


def classify_response(status_code: int, body: bytes) -> bytes:
    """
    Classify a response by status code and body.

    Returns the raw body for status < 400. Otherwise raises ApplicationError
    when the body is a {status, message} envelope, TransportError when not.
    Pure function of its arguments.
    """
    if status_code < 400:
        return body

    text = body.decode("utf-8", errors="replace")
    try:
        envelope = json.loads(text)
    except ValueError:
        envelope = None

    if isinstance(envelope, dict) and ("status" in envelope or "message" in envelope):
        status = envelope.get("status")
        if not isinstance(status, int) or isinstance(status, bool):
            status = status_code
        message = envelope.get("message")
        if message is None or message == "":
            message = f"API error {status_code}"
        raise ApplicationError(str(message), status=status)

    raise TransportError(f"HTTP error {status_code}: {text}", status=status_code, body=text)


class HTTPTransport:
    """
    Authenticated httpx transport for the storage API.

    Usage:
        async with HTTPTransport(config) as transport:
            body = await transport.execute(RequestSpec("GET", "/storage/buckets"))
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(transport=self._transport)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    def build_url(self, path: str, params: Optional[Mapping[str, str]] = None) -> httpx.URL:
        if not path.startswith("/"):
            path = "/" + path
        url = httpx.URL(self._config.origin + path)
        if params:
            url = url.copy_merge_params(dict(params))
        return url

    def headers_for(self, method: str) -> Dict[str, str]:
        headers = {"Authorization": f"Basic {self._config.api_key}"}
        if method.upper() in WRITE_METHODS:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers

    async def execute(self, spec: RequestSpec) -> bytes:
        """
        Perform exactly one request.

        Returns:
            Raw response body (status < 400)

        Raises:
            ApplicationError: decodable error envelope
            TransportError: network failure or undecodable error response
        """
        if not self._client:
            raise RuntimeError("HTTPTransport not initialized. Use 'async with' context.")

        method = spec.method.upper()
        url = self.build_url(spec.path, spec.params)
        timeout = spec.timeout if spec.timeout is not None else self._config.timeout_for(method)

        logger.debug("%s %s (timeout=%ss)", method, url, timeout)
        try:
            response = await self._client.request(
                method,
                url,
                content=spec.content,
                headers=self.headers_for(method),
                timeout=timeout,
            )
        except httpx.RequestError as exc:
            raise TransportError(f"{method} {spec.path} failed: {exc!r}") from exc

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return classify_response(response.status_code, response.content)
