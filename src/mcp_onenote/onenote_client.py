"""Client for the OneNote notebooks/sections API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .cache import SessionCache, name_cache_key
from .errors import DownloadWriteError, InvalidArgumentError, RemoteApiError
from .models import DownloadResult, RemoteResource, ResourceKind
from .session import OAuthSession, bearer_headers

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://graph.microsoft.com/v1.0/me/onenote"

Writer = Callable[[Path, bytes], None]


def write_bytes(path: Path, data: bytes) -> None:
    path.write_bytes(data)


class OneNoteClient:
    """Lists notebooks and sections, downloads sections and resolves notebook names.

    Every call goes through the injected ``OAuthSession``; the client never
    refreshes or stores tokens. Only GET is used against the API.
    """

    def __init__(
        self,
        session: OAuthSession,
        *,
        name_cache: SessionCache[str],
        base_url: str = DEFAULT_API_BASE_URL,
        writer: Writer = write_bytes,
    ) -> None:
        self._session = session
        self._name_cache = name_cache
        self._base_url = base_url.rstrip("/")
        self._writer = writer

    @property
    def session(self) -> OAuthSession:
        return self._session

    @property
    def base_url(self) -> str:
        return self._base_url

    def list_children(self, path: str, token: str) -> list[RemoteResource]:
        """List notebooks at the root (empty path) or the sections of the notebook ending ``path``."""
        if not path:
            kind = ResourceKind.NOTEBOOK
            url = f"{self._base_url}/notebooks"
        else:
            notebook_id = path.rstrip("/").split("/")[-1]
            if not notebook_id:
                raise InvalidArgumentError(f"No notebook id in path {path!r}")
            kind = ResourceKind.SECTION
            url = f"{self._base_url}/notebooks/{notebook_id}/sections/"

        items: list[RemoteResource] = []
        next_url: str | None = url
        while next_url:
            data = self._get_json(next_url, token)
            values = data.get("value") or []
            if not isinstance(values, list):
                raise _malformed(next_url, f"Unexpected value type: {type(values).__name__}")
            for item in values:
                try:
                    if kind is ResourceKind.NOTEBOOK:
                        item_path = quote(str(item["id"]), safe="")
                    else:
                        # Sections are leaves; they keep their notebook's path.
                        item_path = path
                    items.append(RemoteResource.from_api(item, path=item_path, kind=kind))
                except (KeyError, TypeError, AttributeError, ValidationError) as exc:
                    raise _malformed(next_url, f"Malformed {kind.value} item: {exc}") from exc
            next_url = data.get("@odata.nextLink")
        logger.debug("Listed %d %s resources", len(items), kind.value)
        return items

    def download(
        self,
        resource_id: str,
        destination: str | Path,
        *,
        token: str | None = None,
    ) -> DownloadResult:
        """Fetch a section and write the response body verbatim to ``destination``."""
        if not resource_id:
            raise InvalidArgumentError("Empty section id passed to download")
        if token:
            self._session.set_header(bearer_headers(token))
        elif not self._session.is_logged_in():
            raise InvalidArgumentError("No access token for download")

        url = f"{self._base_url}/sections/{quote(resource_id, safe='')}"
        resp = self._send(url)
        if resp.status_code >= 300:
            self._fail(resp, url)

        dest = Path(destination)
        try:
            self._writer(dest, resp.content)
        except OSError as exc:
            raise DownloadWriteError(path=str(dest), reason=str(exc)) from exc
        return DownloadResult(path=str(dest), source_url=url)

    def resolve_name(self, resource_id: str, token: str) -> str:
        """Return a notebook's display name, served from the name cache when possible."""
        if not resource_id:
            raise InvalidArgumentError("Empty notebook id passed to resolve_name")

        # Keyed by token identity so names never leak between accounts.
        key = name_cache_key(token, resource_id)
        cached = self._name_cache.get(key)
        if cached is not None:
            return cached

        url = f"{self._base_url}/notebooks/{quote(resource_id, safe='')}"
        data = self._get_json(url, token)
        try:
            name = _extract_name(data)
        except (TypeError, AttributeError) as exc:
            raise _malformed(url, f"Malformed notebook metadata: {exc}") from exc
        if not isinstance(name, str) or not name:
            raise _malformed(url, "Response carries no notebook name")
        self._name_cache.set(key, name)
        return name

    def _get_json(self, url: str, token: str) -> dict[str, Any]:
        self._session.set_header(bearer_headers(token))
        resp = self._send(url)
        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code >= 400 or (isinstance(data, dict) and "error" in data):
            self._fail(resp, url)
        if not isinstance(data, dict):
            raise _malformed(url, f"Unexpected JSON type: {type(data).__name__}", resp.status_code)
        return data

    def _send(self, url: str) -> httpx.Response:
        try:
            return self._session.get(url)
        except httpx.HTTPError as exc:
            raise RemoteApiError(
                status_code=0,
                method="GET",
                url=url,
                response_text=str(exc),
            ) from exc

    def _fail(self, resp: httpx.Response, url: str) -> NoReturn:
        # Any API error invalidates the session token.
        self._session.log_out()
        raise RemoteApiError(
            status_code=resp.status_code,
            method="GET",
            url=url,
            response_text=(resp.text or "").strip(),
        )


def _malformed(url: str, detail: str, status_code: int = 200) -> RemoteApiError:
    # Malformed bodies leave the session logged in.
    return RemoteApiError(status_code=status_code, method="GET", url=url, response_text=detail)


def _extract_name(data: dict[str, Any]) -> Any:
    values = data.get("value")
    if isinstance(values, list):
        if not values:
            return None
        data = values[0]
    return data.get("name") or data.get("displayName")
