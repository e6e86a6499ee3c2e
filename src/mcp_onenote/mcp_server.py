"""FastMCP server definition (tools)."""

from __future__ import annotations

import functools
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import anyio.to_thread
import httpx
from mcp.server.fastmcp import Context, FastMCP

from .cache import MemorySessionCache
from .dashboard import build_status
from .errors import InvalidArgumentError
from .models import DashboardStatus, DownloadResult, MatchedConnection, RemoteResource
from .onenote_client import OneNoteClient
from .resolver import find_or_sync_notebook
from .session import HttpxOAuthSession, create_http_client
from .settings import Settings
from .sync import notebook_creator


@dataclass(slots=True)
class AppContext:
    settings: Settings
    http: httpx.Client
    name_cache: MemorySessionCache[str]
    notebook_cache: MemorySessionCache[RemoteResource]

    @property
    def base_url(self) -> str:
        return str(self.settings.onenote_api_base_url)

    def client_for(self, token: str | None) -> OneNoteClient:
        # One session per tool call; the httpx connection pool is shared.
        session = HttpxOAuthSession(self.http, token=token)
        return OneNoteClient(session, name_cache=self.name_cache, base_url=self.base_url)


def download_destination(download_dir: str, section_id: str, filename: str | None) -> Path:
    """Resolve where a downloaded section is saved, keeping it inside ``download_dir``."""
    if filename:
        name = Path(filename).name
    else:
        if "/" in section_id or "\\" in section_id or Path(section_id).name != section_id:
            raise InvalidArgumentError(f"Section id cannot name a file: {section_id!r}")
        name = f"{section_id}.one"
    if not name or name in {".", ".."} or "\\" in name:
        raise InvalidArgumentError(f"Invalid download filename: {filename or section_id!r}")

    directory = Path(download_dir)
    dest = directory / name
    if directory.resolve() not in dest.resolve().parents:
        raise InvalidArgumentError(f"Download path escapes {download_dir!r}: {name!r}")
    directory.mkdir(parents=True, exist_ok=True)
    return dest


def create_mcp_server(
    settings: Settings,
    *,
    http_transport: httpx.BaseTransport | None = None,
) -> FastMCP:
    @asynccontextmanager
    async def lifespan(_: FastMCP) -> AsyncIterator[AppContext]:
        http = create_http_client(
            timeout_seconds=settings.http_timeout_seconds,
            max_redirects=settings.max_redirects,
            transport=http_transport,
        )
        try:
            yield AppContext(
                settings=settings,
                http=http,
                name_cache=MemorySessionCache(ttl_seconds=settings.name_cache_ttl_seconds),
                notebook_cache=MemorySessionCache(ttl_seconds=settings.name_cache_ttl_seconds),
            )
        finally:
            http.close()

    mcp = FastMCP(
        "OneNote",
        instructions=(
            "Browse and download Microsoft OneNote notebooks and sections. "
            "Every tool takes the caller's OAuth2 access token explicitly."
        ),
        lifespan=lifespan,
        stateless_http=True,
        json_response=True,
    )

    @mcp.tool()
    async def notebooks_list(access_token: str, ctx: Context) -> list[RemoteResource]:
        """List the user's notebooks."""
        app: AppContext = ctx.request_context.lifespan_context
        client = app.client_for(access_token)
        return await anyio.to_thread.run_sync(
            functools.partial(client.list_children, "", access_token)
        )

    @mcp.tool()
    async def sections_list(
        notebook_path: str,
        access_token: str,
        ctx: Context,
    ) -> list[RemoteResource]:
        """List the sections of the notebook at ``notebook_path`` (as returned by notebooks_list)."""
        app: AppContext = ctx.request_context.lifespan_context
        client = app.client_for(access_token)
        return await anyio.to_thread.run_sync(
            functools.partial(client.list_children, notebook_path, access_token)
        )

    @mcp.tool()
    async def notebook_name(notebook_id: str, access_token: str, ctx: Context) -> dict[str, Any]:
        """Resolve a notebook's display name."""
        app: AppContext = ctx.request_context.lifespan_context
        client = app.client_for(access_token)
        name = await anyio.to_thread.run_sync(
            functools.partial(client.resolve_name, notebook_id, access_token)
        )
        return {"id": notebook_id, "name": name}

    @mcp.tool()
    async def section_download(
        section_id: str,
        access_token: str,
        ctx: Context,
        filename: str | None = None,
    ) -> DownloadResult:
        """Download a section into the server's download directory."""
        app: AppContext = ctx.request_context.lifespan_context
        client = app.client_for(access_token)
        destination = download_destination(app.settings.download_dir, section_id, filename)
        return await anyio.to_thread.run_sync(
            functools.partial(client.download, section_id, destination, token=access_token)
        )

    @mcp.tool()
    async def notebook_find(
        access_token: str,
        ctx: Context,
        title: str | None = None,
    ) -> RemoteResource | None:
        """Find the working notebook by title, asking OneNote to create it when missing."""
        app: AppContext = ctx.request_context.lifespan_context
        client = app.client_for(access_token)
        target = title or app.settings.notebook_title
        return await anyio.to_thread.run_sync(
            functools.partial(
                find_or_sync_notebook,
                client,
                access_token,
                target,
                sync_notebook=notebook_creator(client.session, app.base_url, target),
                max_attempts=app.settings.notebook_sync_attempts,
            )
        )

    @mcp.tool()
    async def dashboard_status(
        user_id: str,
        ctx: Context,
        access_token: str | None = None,
        connected: bool = False,
        remote_account: str | None = None,
        use_login: bool = False,
    ) -> DashboardStatus:
        """Report the user's Office 365 connection state and their OneNote notebook.

        ``connected`` is the host's Office 365 link for the user; ``access_token``
        is the OneNote session token, when the user has signed in to OneNote.
        """
        app: AppContext = ctx.request_context.lifespan_context
        client = app.client_for(access_token)
        matched = (
            MatchedConnection(remote_account=remote_account, use_login=use_login)
            if remote_account
            else None
        )
        title = app.settings.notebook_title
        return await anyio.to_thread.run_sync(
            functools.partial(
                build_status,
                user_id,
                connected=connected,
                matched=matched,
                client=client,
                token=access_token,
                target_title=title,
                sync_notebook=notebook_creator(client.session, app.base_url, title),
                cache=app.notebook_cache,
                max_attempts=app.settings.notebook_sync_attempts,
            )
        )

    return mcp
