"""
Client configuration.

Immutable dataclass; built once and shared by every service of a client.
"""
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

import httpx


DEFAULT_BASE_URL = "https://api.apillon.io"
API_KEY_ENV = "APILLON_API_KEY"
API_URL_ENV = "APILLON_API_URL"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for API access and uploads."""
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    read_timeout: float = 30.0   # GET / DELETE
    write_timeout: float = 60.0  # POST
    max_attempts: int = 3
    retry_delay: float = 1.0     # linear backoff base
    url_ready_delay: float = 2.0  # settle time for fresh signed URLs
    default_content_type: str = "text/plain"

    def __post_init__(self):
        if not self.api_key:
            raise ValueError(
                f"API key is required: pass api_key or set {API_KEY_ENV}"
            )

        try:
            url = httpx.URL(self.base_url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise ValueError(f"invalid base URL {self.base_url!r}: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(
                f"invalid base URL {self.base_url!r}: expected http(s)://host"
            )
        if url.query or url.fragment:
            raise ValueError(
                f"invalid base URL {self.base_url!r}: query and fragment not allowed"
            )

        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        for name in ("read_timeout", "write_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in ("retry_delay", "url_ready_delay"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    @property
    def origin(self) -> str:
        """Base URL without a trailing slash."""
        return self.base_url.rstrip("/")

    def timeout_for(self, method: str) -> float:
        """Default request timeout for an HTTP verb."""
        if method.upper() in ("GET", "DELETE", "HEAD"):
            return self.read_timeout
        return self.write_timeout

    def with_overrides(self, **changes) -> "ClientConfig":
        return replace(self, **changes)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        api_key: Optional[str] = None,
        **overrides,
    ) -> "ClientConfig":
        """
        Build config, falling back to environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            api_key: Explicit key; wins over APILLON_API_KEY
            **overrides: Any other ClientConfig field

        Returns:
            ClientConfig
        """
        env = os.environ if environ is None else environ
        key = api_key or env.get(API_KEY_ENV, "")
        if "base_url" not in overrides and env.get(API_URL_ENV):
            overrides["base_url"] = env[API_URL_ENV]
        return cls(api_key=key, **overrides)
