"""Shared fixtures: fast config and a recording httpx mock transport."""
import json

import httpx
import pytest

from apillon.config import ClientConfig


BASE_URL = "https://api.test.local"


@pytest.fixture
def config():
    return ClientConfig(
        api_key="test-key",
        base_url=BASE_URL,
        retry_delay=0,
        url_ready_delay=0,
    )


class Recorder:
    """Routes requests to a handler and keeps every request seen."""

    def __init__(self, handler):
        self.requests = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def json_response(status_code: int, payload) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode())
