"""Shared test fixtures for pytest.

Provides a controllable clock, file-backed stores under tmp_path and
in-memory fakes for every upstream fetcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from narrative.fetchers.results import Empty, FetchResult, Ok
from narrative.storage.backends import JsonFileBackend
from narrative.storage.history import HistoryStore
from narrative.storage.sticky import StickySignalStore
from narrative.types import NarrativeScore

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class MemoryBackend:
    """Storage backend that keeps records in a list."""

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records = list(records or [])
        self.saves = 0

    def load(self) -> list[dict[str, Any]]:
        return [dict(r) for r in self.records]

    def save(self, records: list[dict[str, Any]]) -> None:
        self.saves += 1
        self.records = [dict(r) for r in records]


@dataclass
class FakeFetcher:
    """Returns a canned FetchResult from every fetch method and records calls."""

    result: FetchResult = field(default_factory=lambda: Empty("not configured"))
    calls: list[tuple[str, tuple]] = field(default_factory=list)
    error: Exception | None = None

    async def _respond(self, name: str, *args: Any) -> FetchResult:
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error
        return self.result

    async def fetch_org_activity(self) -> FetchResult:
        return await self._respond("fetch_org_activity")

    async def fetch_awards(self, days: int = 30) -> FetchResult:
        return await self._respond("fetch_awards", days)

    async def fetch_breaking_awards(self) -> FetchResult:
        return await self._respond("fetch_breaking_awards")

    async def fetch_rounds(self, days: int = 180) -> FetchResult:
        return await self._respond("fetch_rounds", days)

    async def fetch_snapshot(self) -> FetchResult:
        return await self._respond("fetch_snapshot")

    async def fetch_releases(self, days: int = 30) -> FetchResult:
        return await self._respond("fetch_releases", days)


class FakePriceFetcher:
    def __init__(self, prices: dict[str, FetchResult]) -> None:
        self.prices = prices

    async def fetch_price(self, token_id: str) -> FetchResult:
        return self.prices.get(token_id, Empty("unknown token"))


def ok(payload: Any) -> Ok:
    return Ok(payload)


def make_score(
    overall: int,
    *,
    timestamp: datetime = NOW,
    components: dict[str, int] | None = None,
    confidence: float = 1.0,
    signals: tuple = (),
) -> NarrativeScore:
    return NarrativeScore(
        id=f"rni-{int(timestamp.timestamp() * 1000)}",
        timestamp=timestamp,
        overall=overall,
        components=components or {},
        trend="stable",
        confidence=confidence,
        signals=signals,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sticky_store(tmp_path, clock) -> StickySignalStore:
    return StickySignalStore(JsonFileBackend(tmp_path / "sticky-signals.json"), clock=clock)


@pytest.fixture
def history_store(tmp_path, clock) -> HistoryStore:
    return HistoryStore(JsonFileBackend(tmp_path / "narrative-history.json"), clock=clock)
