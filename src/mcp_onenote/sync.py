"""Remote notebook creation, used as the resolver's sync side effect."""

from __future__ import annotations

from collections.abc import Callable

from .errors import RemoteApiError
from .session import OAuthSession


def notebook_creator(session: OAuthSession, base_url: str, title: str) -> Callable[[], None]:
    """Return a callable that asks the API to create the notebook ``title``.

    A conflict response means the notebook already exists and is treated as
    success.
    """
    url = f"{base_url.rstrip('/')}/notebooks"

    def create() -> None:
        resp = session.post_json(url, {"displayName": title})
        if resp.status_code >= 400 and resp.status_code != 409:
            raise RemoteApiError(
                status_code=resp.status_code,
                method="POST",
                url=url,
                response_text=(resp.text or "").strip(),
            )

    return create
