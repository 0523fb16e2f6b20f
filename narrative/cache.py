"""Injected TTL cache used by the upstream adapters."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class Cache(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl: float) -> None: ...


@dataclass
class _Entry:
    value: Any
    expires_at: float


@dataclass
class InMemoryTTLCache:
    """Thread-safe in-memory cache with per-entry expiry."""

    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, _Entry] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self.clock():
                del self._entries[key]
                return None
            logger.debug("Cache hit: %s", key)
            return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        if ttl <= 0:
            return
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self.clock() + ttl)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class NullCache:
    """Cache that never stores anything."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any, ttl: float) -> None:
        return None
