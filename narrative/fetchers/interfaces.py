from __future__ import annotations

from typing import Protocol

from narrative.fetchers.results import (
    BreakingAward,
    ContractAward,
    FetchResult,
    FundingRound,
    MarketSnapshot,
    OrgActivity,
    Release,
)


class DeveloperActivityFetcher(Protocol):
    async def fetch_org_activity(self) -> FetchResult[list[OrgActivity]]: ...


class ContractsFetcher(Protocol):
    async def fetch_awards(self, days: int = 30) -> FetchResult[list[ContractAward]]: ...


class BreakingAwardsFetcher(Protocol):
    async def fetch_breaking_awards(self) -> FetchResult[list[BreakingAward]]: ...


class FundingFetcher(Protocol):
    async def fetch_rounds(self, days: int = 180) -> FetchResult[list[FundingRound]]: ...


class MarketFetcher(Protocol):
    async def fetch_snapshot(self) -> FetchResult[MarketSnapshot]: ...


class PredictionMarketFetcher(Protocol):
    async def fetch_price(self, token_id: str) -> FetchResult[float]: ...


class ReleaseFetcher(Protocol):
    async def fetch_releases(self, days: int = 30) -> FetchResult[list[Release]]: ...
