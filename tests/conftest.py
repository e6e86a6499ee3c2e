from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx
import pytest

from mcp_onenote.cache import MemorySessionCache
from mcp_onenote.onenote_client import OneNoteClient
from mcp_onenote.session import HttpxOAuthSession, create_http_client

BASE_URL = "https://onenote.test/api/v1.0"

Handler = Callable[[httpx.Request], httpx.Response]


class Recorder:
    """Collects requests and log-out calls for a mocked OneNote API."""

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []
        self.log_outs = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def on_log_out(self) -> None:
        self.log_outs += 1


@pytest.fixture
def make_client() -> Iterator[Callable[..., tuple[OneNoteClient, Recorder]]]:
    clients: list[httpx.Client] = []

    def factory(handler: Handler, **kwargs) -> tuple[OneNoteClient, Recorder]:
        recorder = Recorder(handler)
        http = create_http_client(transport=httpx.MockTransport(recorder))
        clients.append(http)
        session = HttpxOAuthSession(http, on_log_out=recorder.on_log_out)
        kwargs.setdefault("name_cache", MemorySessionCache())
        client = OneNoteClient(session, base_url=BASE_URL, **kwargs)
        return client, recorder

    yield factory
    for http in clients:
        http.close()
