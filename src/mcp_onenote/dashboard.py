"""Account status for the OneNote dashboard widget."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .cache import SessionCache
from .errors import OneNoteError
from .models import ConnectionState, DashboardStatus, MatchedConnection, RemoteResource
from .onenote_client import OneNoteClient
from .resolver import DEFAULT_SYNC_ATTEMPTS, find_or_sync_notebook

logger = logging.getLogger(__name__)

NO_NOTEBOOK_MESSAGE = "Could not find or create your notebook."
SIGN_IN_MESSAGE = "Sign in to your Microsoft account to use OneNote."


def notebook_for_user(
    user_id: str,
    *,
    client: OneNoteClient,
    token: str,
    target_title: str,
    sync_notebook: Callable[[], None],
    cache: SessionCache[RemoteResource],
    max_attempts: int = DEFAULT_SYNC_ATTEMPTS,
) -> RemoteResource | None:
    """Per-user cached lookup of the working notebook. Misses are not cached."""
    notebook = cache.get(user_id)
    if notebook is not None:
        return notebook
    notebook = find_or_sync_notebook(
        client,
        token,
        target_title,
        sync_notebook=sync_notebook,
        max_attempts=max_attempts,
    )
    if notebook is not None:
        cache.set(user_id, notebook)
    return notebook


def build_status(
    user_id: str,
    *,
    connected: bool,
    matched: MatchedConnection | None = None,
    client: OneNoteClient | None = None,
    token: str | None = None,
    target_title: str = "",
    sync_notebook: Callable[[], None] | None = None,
    cache: SessionCache[RemoteResource] | None = None,
    max_attempts: int = DEFAULT_SYNC_ATTEMPTS,
) -> DashboardStatus:
    """Connection state plus, for connected and unconnected users, the OneNote notebook link.

    Matched users only get the account they were matched to; the OneNote part
    is shown once they finish connecting.
    """
    if connected:
        status = DashboardStatus(state=ConnectionState.CONNECTED)
    elif matched is not None:
        return DashboardStatus(
            state=ConnectionState.MATCHED,
            remote_account=matched.remote_account,
            use_login=matched.use_login,
        )
    else:
        status = DashboardStatus(state=ConnectionState.NOT_CONNECTED)

    if client is None or not token or not client.session.is_logged_in():
        status.message = SIGN_IN_MESSAGE
        return status

    try:
        if cache is not None:
            notebook = notebook_for_user(
                user_id,
                client=client,
                token=token,
                target_title=target_title,
                sync_notebook=sync_notebook or _no_sync,
                cache=cache,
                max_attempts=max_attempts,
            )
        else:
            notebook = find_or_sync_notebook(
                client,
                token,
                target_title,
                sync_notebook=sync_notebook or _no_sync,
                max_attempts=max_attempts,
            )
    except OneNoteError as exc:
        logger.warning("Notebook lookup failed for user %s: %s", user_id, exc)
        status.message = str(exc)
        return status

    if notebook is None:
        status.message = NO_NOTEBOOK_MESSAGE
    else:
        status.notebook = notebook
        status.notebook_url = notebook.self_url
    return status


def _no_sync() -> None:
    return None
