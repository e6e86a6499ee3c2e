"""Locate the user's working notebook, asking the remote side to create it when missing."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .errors import InvalidArgumentError
from .models import RemoteResource
from .onenote_client import OneNoteClient

logger = logging.getLogger(__name__)

# Listings before giving up. Remote creation is eventually consistent.
DEFAULT_SYNC_ATTEMPTS = 2


def find_or_sync_notebook(
    client: OneNoteClient,
    token: str,
    target_title: str,
    *,
    sync_notebook: Callable[[], None],
    max_attempts: int = DEFAULT_SYNC_ATTEMPTS,
) -> RemoteResource | None:
    """Return the root notebook titled exactly ``target_title``, or ``None``.

    ``sync_notebook`` runs between listings, never after the last one.
    """
    if max_attempts < 1:
        raise InvalidArgumentError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(1, max_attempts + 1):
        for notebook in client.list_children("", token):
            if notebook.title == target_title:
                return notebook
        if attempt < max_attempts:
            logger.info("Notebook %r not found (attempt %d), requesting sync", target_title, attempt)
            sync_notebook()

    logger.info("Notebook %r still missing after %d attempts", target_title, max_attempts)
    return None
