"""File-backed feeds: curated breaking contracts, funding database, market snapshot.

These are maintained by hand (or by an external job) under the data
directory. A missing file is reported as `Empty`, an unparseable one as
`MalformedResponse`.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, TypeVar

from pydantic import BaseModel

from narrative.fetchers.results import (
    BreakingAward,
    Empty,
    FetchResult,
    FundingRound,
    MalformedResponse,
    MarketSnapshot,
    Ok,
    PricePoint,
)
from narrative.fetchers.schemas import BreakingContractsFile, FundingDatabaseFile, MarketSnapshotFile
from narrative.types import utc_now

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def load_json_model(path: Path, model: type[M]) -> M | Empty | MalformedResponse:
    if not path.exists():
        return Empty(f"{path.name} not found")
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return model.model_validate(data)
    except (OSError, ValueError) as exc:
        # pydantic.ValidationError is a ValueError
        logger.warning("Cannot parse %s: %s", path, exc)
        return MalformedResponse(f"{path.name}: {exc}")


def _round_title(round_name: str, description: str) -> str:
    if round_name and description:
        return f"{round_name}: {description}"
    return round_name or description


class BreakingContractsFeed:
    """Awards announced ahead of the official federal feed."""

    source = "Breaking News"

    def __init__(self, path: str | Path, *, lookback_days: int = 30, clock: Callable[[], datetime] = utc_now) -> None:
        self.path = Path(path)
        self.lookback_days = lookback_days
        self._clock = clock

    async def fetch_breaking_awards(self) -> FetchResult[list[BreakingAward]]:
        parsed = load_json_model(self.path, BreakingContractsFile)
        if isinstance(parsed, (Empty, MalformedResponse)):
            return parsed

        cutoff = self._clock() - timedelta(days=self.lookback_days)
        awards = [
            BreakingAward(
                id=c.id,
                company=c.company,
                amount=c.amount,
                agency=c.agency,
                description=c.description,
                announced_date=c.announced_date,
                url=c.url,
            )
            for c in parsed.contracts
            if c.announced_date >= cutoff
        ]
        if not awards:
            return Empty(f"no breaking awards in last {self.lookback_days} days")
        return Ok(awards)


class CuratedFundingDatabase:
    source = "Curated Database"

    def __init__(self, path: str | Path, *, clock: Callable[[], datetime] = utc_now) -> None:
        self.path = Path(path)
        self._clock = clock

    async def fetch_rounds(self, days: int = 180) -> FetchResult[list[FundingRound]]:
        parsed = load_json_model(self.path, FundingDatabaseFile)
        if isinstance(parsed, (Empty, MalformedResponse)):
            return parsed

        cutoff = self._clock() - timedelta(days=days)
        rounds = [
            FundingRound(
                company=r.company,
                amount=r.amount,
                date=r.date,
                source=self.source,
                url=r.url,
                title=_round_title(r.round, r.description),
            )
            for r in parsed.rounds
            if r.date >= cutoff
        ]
        logger.info("Loaded %d funding rounds (last %d days)", len(rounds), days)
        if not rounds:
            return Empty(f"no curated rounds in last {days} days")
        return Ok(rounds)


class MarketSnapshotFeed:
    """Index and benchmark closes exported by the market data job."""

    source = "Market Snapshot"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def fetch_snapshot(self) -> FetchResult[MarketSnapshot]:
        parsed = load_json_model(self.path, MarketSnapshotFile)
        if isinstance(parsed, (Empty, MalformedResponse)):
            return parsed

        def series(points) -> tuple[PricePoint, ...]:
            ordered = sorted(points, key=lambda p: p.date)
            return tuple(PricePoint(date=p.date, close=p.close) for p in ordered)

        snapshot = MarketSnapshot(
            index_history=series(parsed.index),
            benchmark_history=series(parsed.benchmark),
            constituent_changes=tuple(parsed.constituent_changes),
            benchmark_symbol=parsed.benchmark_symbol,
        )
        if not (snapshot.index_history or snapshot.benchmark_history or snapshot.constituent_changes):
            return Empty("market snapshot is empty")
        return Ok(snapshot)
