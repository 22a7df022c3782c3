"""HTTP adapter for authenticated storage API operations."""
from __future__ import annotations

import json as jsonlib
from typing import Any, Dict, Mapping, Optional

import httpx

from ..config import ClientConfig
from ..errors import ProtocolViolationError
from .retry import RetryExecutor
from .transport import HTTPTransport, RequestSpec


def decode_json(payload: bytes, what: str) -> Dict[str, Any]:
    """Decode a JSON object response; anything else is a protocol violation."""
    try:
        data = jsonlib.loads(payload)
    except ValueError as exc:
        raise ProtocolViolationError(f"failed to decode {what} response: {exc}") from exc
    if not isinstance(data, dict):
        raise ProtocolViolationError(
            f"unexpected {what} response: expected JSON object, got {type(data).__name__}"
        )
    return data


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements IAPIClient protocol. Every call goes through the retry
    executor; only transport failures are retried.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry: Optional[RetryExecutor] = None,
    ):
        self._config = config
        self._transport = HTTPTransport(config, transport)
        self._retry = retry or RetryExecutor(config.max_attempts, config.retry_delay)
        self._opened = False

    async def __aenter__(self):
        await self._transport.__aenter__()
        self._opened = True
        return self

    async def __aexit__(self, *args):
        if self._opened:
            await self._transport.__aexit__(*args)
            self._opened = False

    async def request(self, spec: RequestSpec) -> bytes:
        if not self._opened:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")
        return await self._retry.run(
            lambda: self._transport.execute(spec),
            f"{spec.method} {spec.path}",
        )

    async def get(self, path: str, params: Optional[Mapping[str, str]] = None) -> bytes:
        return await self.request(RequestSpec("GET", path, params=dict(params or {})))

    async def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> bytes:
        content = jsonlib.dumps(json).encode("utf-8") if json is not None else None
        return await self.request(RequestSpec("POST", path, content=content))

    async def delete(self, path: str) -> bytes:
        return await self.request(RequestSpec("DELETE", path))
