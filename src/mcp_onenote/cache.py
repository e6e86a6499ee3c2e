"""Session-scoped caches."""

from __future__ import annotations

import hashlib
import threading
import time
from typing import Generic, Protocol, TypeVar

V = TypeVar("V")


class SessionCache(Protocol[V]):
    def get(self, key: str) -> V | None: ...

    def set(self, key: str, value: V) -> None: ...


class MemorySessionCache(Generic[V]):
    """In-process key/value store with an optional per-entry lifetime."""

    def __init__(self, *, ttl_seconds: float | None = None) -> None:
        self._ttl = ttl_seconds
        self._items: dict[str, tuple[V, float | None]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> V | None:
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and expires_at <= time.monotonic():
                del self._items[key]
                return None
            return value

    def set(self, key: str, value: V) -> None:
        now = time.monotonic()
        expires_at = now + self._ttl if self._ttl else None
        with self._lock:
            if self._ttl:
                self._purge(now)
            self._items[key] = (value, expires_at)

    def _purge(self, now: float) -> None:
        # Keys rotate with tokens, so stale entries are never read again.
        expired = [k for k, (_, exp) in self._items.items() if exp is not None and exp <= now]
        for k in expired:
            del self._items[k]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def token_identity(token: str) -> str:
    """Stable, non-reversible identity for a bearer token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]


def name_cache_key(token: str, resource_id: str) -> str:
    return f"{token_identity(token)}_{resource_id}"
