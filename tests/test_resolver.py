from __future__ import annotations

import httpx
import pytest

from mcp_onenote.errors import InvalidArgumentError, RemoteApiError
from mcp_onenote.resolver import find_or_sync_notebook


class Listings:
    """Serves a different notebook listing on each call."""

    def __init__(self, *pages: list[dict]) -> None:
        self.pages = list(pages)
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        page = self.pages[min(self.calls, len(self.pages) - 1)]
        self.calls += 1
        return httpx.Response(200, json={"value": page})


class SyncCounter:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


def test_found_on_first_listing_skips_sync(make_client) -> None:
    listings = Listings([{"id": "a", "name": "Other"}, {"id": "b", "name": "Moodle Notebook"}])
    client, _ = make_client(listings)
    sync = SyncCounter()

    notebook = find_or_sync_notebook(client, "tok", "Moodle Notebook", sync_notebook=sync)

    assert notebook is not None
    assert notebook.id == "b"
    assert sync.calls == 0
    assert listings.calls == 1


def test_found_only_on_second_listing(make_client) -> None:
    listings = Listings([{"id": "a", "name": "Other"}], [{"id": "m", "name": "Moodle Notebook"}])
    client, _ = make_client(listings)
    sync = SyncCounter()

    notebook = find_or_sync_notebook(client, "tok", "Moodle Notebook", sync_notebook=sync)

    assert notebook is not None
    assert notebook.id == "m"
    assert sync.calls == 1
    assert listings.calls == 2


def test_missing_from_both_listings(make_client) -> None:
    listings = Listings([{"id": "a", "name": "Other"}])
    client, _ = make_client(listings)
    sync = SyncCounter()

    assert find_or_sync_notebook(client, "tok", "Moodle Notebook", sync_notebook=sync) is None
    assert sync.calls == 1
    assert listings.calls == 2


def test_title_match_is_case_sensitive(make_client) -> None:
    client, _ = make_client(Listings([{"id": "a", "name": "moodle notebook"}]))
    sync = SyncCounter()

    assert find_or_sync_notebook(client, "tok", "Moodle Notebook", sync_notebook=sync) is None


def test_attempt_bound_is_configurable(make_client) -> None:
    listings = Listings([])
    client, _ = make_client(listings)
    sync = SyncCounter()

    result = find_or_sync_notebook(
        client, "tok", "Moodle Notebook", sync_notebook=sync, max_attempts=4
    )

    assert result is None
    assert listings.calls == 4
    assert sync.calls == 3


def test_rejects_non_positive_attempts(make_client) -> None:
    client, recorder = make_client(Listings([]))

    with pytest.raises(InvalidArgumentError):
        find_or_sync_notebook(client, "tok", "x", sync_notebook=SyncCounter(), max_attempts=0)

    assert recorder.requests == []


def test_listing_error_propagates(make_client) -> None:
    client, recorder = make_client(lambda request: httpx.Response(401, json={"error": {}}))
    sync = SyncCounter()

    with pytest.raises(RemoteApiError):
        find_or_sync_notebook(client, "tok", "Moodle Notebook", sync_notebook=sync)

    assert sync.calls == 0
    assert recorder.log_outs == 1
