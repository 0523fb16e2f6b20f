"""Append-only history of composite scores with 365-day retention."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import RLock
from typing import Callable, Optional

from narrative.errors import PersistenceReadError, PersistenceWriteError
from narrative.storage.backends import StorageBackend
from narrative.types import NarrativeScore, Trend, utc_now

logger = logging.getLogger(__name__)

RETENTION_DAYS = 365
STATS_TREND_THRESHOLD = 3


@dataclass(frozen=True)
class HistoryStats:
    current: Optional[int]
    min: int
    max: int
    avg: float
    trend: Trend
    count: int


class HistoryStore:
    def __init__(
        self,
        backend: StorageBackend,
        *,
        clock: Callable[[], datetime] = utc_now,
        retention_days: int = RETENTION_DAYS,
    ) -> None:
        self._backend = backend
        self._clock = clock
        self._retention = timedelta(days=retention_days)
        self._entries: Optional[list[NarrativeScore]] = None
        self._lock = RLock()
        self.last_write_error: Optional[PersistenceWriteError] = None

    def _ensure_loaded(self) -> list[NarrativeScore]:
        if self._entries is not None:
            return self._entries

        entries: list[NarrativeScore] = []
        try:
            raw = self._backend.load()
        except PersistenceReadError as exc:
            logger.warning("Score history unreadable, starting empty: %s", exc)
            raw = []

        for item in raw:
            try:
                entries.append(NarrativeScore.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed history entry %r: %s", item.get("id"), exc)

        self._entries = self._prune(entries)
        return self._entries

    def _prune(self, entries: list[NarrativeScore]) -> list[NarrativeScore]:
        cutoff = self._clock() - self._retention
        kept = [e for e in entries if e.timestamp >= cutoff]
        if len(kept) != len(entries):
            logger.info("Pruned %d history entries older than %d days", len(entries) - len(kept), self._retention.days)
        return kept

    def append(self, score: NarrativeScore) -> bool:
        """Append `score`, prune expired entries and persist.

        Returns True if the write was durable. On failure the entry is still
        visible to this process and `last_write_error` is set.
        """
        with self._lock:
            entries = self._ensure_loaded()
            entries.append(score)
            self._entries = self._prune(entries)
            try:
                self._backend.save([e.to_dict() for e in self._entries])
            except PersistenceWriteError as exc:
                logger.warning("Score history write failed, entry kept in memory only: %s", exc)
                self.last_write_error = exc
                return False
        self.last_write_error = None
        return True

    def query(self, days: float) -> list[NarrativeScore]:
        """Entries from the last `days` days, in storage order."""
        cutoff = self._clock() - timedelta(days=days)
        with self._lock:
            return [e for e in self._ensure_loaded() if e.timestamp >= cutoff]

    def latest(self) -> Optional[NarrativeScore]:
        with self._lock:
            entries = self._ensure_loaded()
            return entries[-1] if entries else None

    def stats(self, days: float = 30) -> HistoryStats:
        scores = self.query(days)
        if not scores:
            return HistoryStats(current=None, min=0, max=0, avg=0.0, trend="stable", count=0)

        values = [s.overall for s in scores]
        diff = values[-1] - values[0]
        if diff > STATS_TREND_THRESHOLD:
            trend: Trend = "up"
        elif diff < -STATS_TREND_THRESHOLD:
            trend = "down"
        else:
            trend = "stable"

        return HistoryStats(
            current=values[-1],
            min=min(values),
            max=max(values),
            avg=round(sum(values) / len(values), 1),
            trend=trend,
            count=len(values),
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._ensure_loaded())
