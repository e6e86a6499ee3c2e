"""Domain errors."""

from __future__ import annotations

from dataclasses import dataclass


class OneNoteError(RuntimeError):
    """Base class for every error raised by the OneNote client."""


@dataclass(slots=True, eq=False)
class RemoteApiError(OneNoteError):
    """Raised when the OneNote API returns a non-success response or an error envelope."""

    status_code: int
    method: str
    url: str
    response_text: str

    def __str__(self) -> str:  # pragma: no cover
        return (
            f"OneNote API error {self.status_code} for {self.method} {self.url}: "
            f"{self.response_text}"
        )


@dataclass(slots=True, eq=False)
class DownloadWriteError(OneNoteError):
    """Raised when downloaded content cannot be written to its destination."""

    path: str
    reason: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Could not write {self.path}: {self.reason}"


class InvalidArgumentError(OneNoteError):
    """Raised when a caller supplies an empty or malformed identifier."""
