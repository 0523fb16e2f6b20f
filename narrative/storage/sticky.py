"""Sticky signal store.

Keeps large discrete events (contract awards, funding rounds) relevant for
weeks after their originating fetcher's lookback window has moved on.
Impact is re-derived on every query from the fixed base impact and the
event's age, so nothing is ever rewritten in place.

Usage:
    store = StickySignalStore(JsonFileBackend("data/sticky-signals.json"))
    store.add(signal)                                # no-op if the id exists
    active = store.active_signals(SignalType.CONTRACT)
    removed = store.cleanup()                        # drop records > 30 days

    with store.batched():                            # one backend write on exit
        store.add(a)
        store.add(b)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from threading import RLock
from typing import Callable, Iterator, Optional

from narrative.errors import PersistenceReadError, PersistenceWriteError
from narrative.signals.decay import EXPIRY_DAYS, days_between, decayed_impact
from narrative.storage.backends import StorageBackend
from narrative.types import ActiveStickySignal, SignalType, StickySignal, utc_now

logger = logging.getLogger(__name__)


class StickySignalStore:
    """Keyed, write-through store of sticky signals.

    State is loaded lazily on first use and kept in memory; every mutation
    is written back to the backend, or once at the end of a `batched()`
    block. A failed write leaves the in-memory
    change in place and is exposed through `last_write_error`.
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        clock: Callable[[], datetime] = utc_now,
        expiry_days: int = EXPIRY_DAYS,
    ) -> None:
        self._backend = backend
        self._clock = clock
        self._expiry_days = expiry_days
        self._records: Optional[dict[str, StickySignal]] = None
        self._lock = RLock()
        self._batch_depth = 0
        self._dirty = False
        self.last_write_error: Optional[PersistenceWriteError] = None

    def _ensure_loaded(self) -> dict[str, StickySignal]:
        if self._records is not None:
            return self._records

        records: dict[str, StickySignal] = {}
        try:
            raw = self._backend.load()
        except PersistenceReadError as exc:
            logger.warning("Sticky signal store unreadable, starting empty: %s", exc)
            raw = []

        for item in raw:
            try:
                signal = StickySignal.from_dict(item)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed sticky signal %r: %s", item.get("id"), exc)
                continue
            records.setdefault(signal.id, signal)

        self._records = records
        logger.debug("Loaded %d sticky signals", len(records))
        return records

    def _persist(self, records: dict[str, StickySignal]) -> bool:
        try:
            self._backend.save([s.to_dict() for s in records.values()])
        except PersistenceWriteError as exc:
            logger.warning("Sticky signal write failed, change kept in memory only: %s", exc)
            self.last_write_error = exc
            return False
        self.last_write_error = None
        return True

    def _write(self, records: dict[str, StickySignal]) -> None:
        if self._batch_depth:
            self._dirty = True
        else:
            self._persist(records)

    def flush(self) -> bool:
        """Write pending changes from a `batched()` block now.

        Returns False only when a pending write failed.
        """
        with self._lock:
            if not self._dirty or self._records is None:
                return True
            self._dirty = False
            return self._persist(self._records)

    @contextmanager
    def batched(self) -> Iterator[None]:
        """Defer backend writes until the outermost block exits.

        Reads inside the block still see every change.
        """
        with self._lock:
            self._batch_depth += 1
        try:
            yield
        finally:
            with self._lock:
                self._batch_depth -= 1
                if not self._batch_depth:
                    self.flush()

    def add(self, signal: StickySignal) -> bool:
        """Insert `signal` unless one with the same id exists.

        Returns True when a new record was inserted.
        """
        with self._lock:
            records = self._ensure_loaded()
            if signal.id in records:
                return False
            records[signal.id] = signal
            self._write(records)
        logger.info("New sticky signal: %s (base impact %.1f)", signal.title, signal.base_impact)
        return True

    def get(self, signal_id: str) -> Optional[StickySignal]:
        with self._lock:
            return self._ensure_loaded().get(signal_id)

    def active_signals(self, signal_type: Optional[SignalType] = None) -> list[ActiveStickySignal]:
        """Records with their decayed impact, excluding anything fully decayed."""
        now = self._clock()
        with self._lock:
            snapshot = list(self._ensure_loaded().values())

        active: list[ActiveStickySignal] = []
        for signal in snapshot:
            if signal_type is not None and signal.type is not signal_type:
                continue
            age = days_between(signal.timestamp, now)
            impact = decayed_impact(signal.base_impact, age)
            if impact <= 0:
                continue
            active.append(ActiveStickySignal(signal=signal, days_ago=age, decayed_impact=impact))
        return active

    def cleanup(self) -> int:
        """Physically remove records older than the expiry horizon.

        Returns the number of records removed.
        """
        now = self._clock()
        with self._lock:
            records = self._ensure_loaded()
            expired = [
                sid for sid, s in records.items() if days_between(s.timestamp, now) > self._expiry_days
            ]
            for sid in expired:
                del records[sid]
            if expired:
                self._write(records)

        if expired:
            logger.info("Cleaned up %d expired sticky signals", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ensure_loaded())
