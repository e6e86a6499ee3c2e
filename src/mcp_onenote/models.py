"""Structured models for OneNote resources and dashboard status."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ResourceKind(str, Enum):
    NOTEBOOK = "notebook"
    SECTION = "section"


def _author(raw: Any) -> str | None:
    # Graph nests the author as createdBy.user.displayName; the legacy API used a string.
    if isinstance(raw, dict):
        user = raw.get("user") or {}
        return user.get("displayName")
    return raw or None


class RemoteResource(BaseModel):
    """Snapshot of one notebook or section from a listing response."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    path: str
    last_modified: datetime | None = None
    author: str | None = None
    self_url: str | None = None
    kind: ResourceKind

    @classmethod
    def from_api(cls, item: dict[str, Any], *, path: str, kind: ResourceKind) -> RemoteResource:
        return cls(
            id=str(item["id"]),
            title=item.get("displayName") or item.get("name") or "",
            path=path,
            last_modified=item.get("lastModifiedDateTime") or item.get("lastModifiedTime"),
            author=_author(item.get("createdBy")),
            self_url=item.get("self"),
            kind=kind,
        )


class DownloadResult(BaseModel):
    path: str
    source_url: str


class ConnectionState(str, Enum):
    CONNECTED = "connected"
    MATCHED = "matched"
    NOT_CONNECTED = "not_connected"


class MatchedConnection(BaseModel):
    """A remote account the user was matched to but has not yet authorised."""

    remote_account: str
    use_login: bool = False


class DashboardStatus(BaseModel):
    state: ConnectionState
    remote_account: str | None = None
    use_login: bool = False
    notebook: RemoteResource | None = None
    notebook_url: str | None = None
    message: str | None = None
