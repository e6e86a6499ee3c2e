"""Authenticated HTTP session used for every OneNote API call."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


class OAuthSession(Protocol):
    """The OAuth2 capability the OneNote client is built on."""

    def set_header(self, headers: Mapping[str, str]) -> None: ...

    def get(self, url: str) -> httpx.Response: ...

    def post_json(self, url: str, payload: dict[str, Any]) -> httpx.Response: ...

    def log_out(self) -> None: ...

    def is_logged_in(self) -> bool: ...


def bearer_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}


def create_http_client(
    *,
    timeout_seconds: float = 15.0,
    max_redirects: int = 3,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Build the shared client; the API redirects downloads to the real content location."""
    return httpx.Client(
        timeout=httpx.Timeout(timeout_seconds),
        follow_redirects=True,
        max_redirects=max_redirects,
        transport=transport,
    )


class HttpxOAuthSession:
    """Request-scoped OAuth session over a shared ``httpx.Client``.

    Headers are held per session so concurrent requests sharing the
    connection pool never see each other's tokens.
    """

    def __init__(
        self,
        client: httpx.Client,
        *,
        token: str | None = None,
        on_log_out: Callable[[], None] | None = None,
    ) -> None:
        self._client = client
        self._headers: dict[str, str] = bearer_headers(token) if token else {}
        self._on_log_out = on_log_out
        self._logged_in = bool(token)

    def set_header(self, headers: Mapping[str, str]) -> None:
        self._headers.update(headers)
        if "Authorization" in headers:
            self._logged_in = True

    def get(self, url: str) -> httpx.Response:
        logger.debug("GET %s", url)
        return self._client.get(url, headers=self._headers)

    def post_json(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        logger.debug("POST %s", url)
        return self._client.post(url, headers=self._headers, json=payload)

    def log_out(self) -> None:
        logger.warning("Logging out of OneNote session after an API error")
        self._headers.pop("Authorization", None)
        self._logged_in = False
        if self._on_log_out is not None:
            self._on_log_out()

    def is_logged_in(self) -> bool:
        return self._logged_in
