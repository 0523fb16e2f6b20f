"""Wire a `NarrativeIndex` from configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from narrative.aggregator import NarrativeIndex
from narrative.cache import Cache, InMemoryTTLCache
from narrative.config import NarrativeConfig
from narrative.fetchers.files import BreakingContractsFeed, CuratedFundingDatabase, MarketSnapshotFeed
from narrative.fetchers.github import GitHubClient
from narrative.fetchers.newsapi import NewsAPIClient
from narrative.fetchers.polymarket import PolymarketClient
from narrative.fetchers.usaspending import USASpendingClient
from narrative.scorers import (
    ComponentScorer,
    ContractsScorer,
    DeveloperActivityScorer,
    FundingScorer,
    MarketAlphaScorer,
    NewsPlaceholderScorer,
    PredictionMarketScorer,
    ReleaseVelocityScorer,
)
from narrative.signals.weights import active_weights
from narrative.storage.backends import JsonFileBackend, SqlBackend, create_sql_engine
from narrative.storage.history import HistoryStore
from narrative.storage.models import NarrativeScoreRow, StickySignalRow
from narrative.storage.sticky import StickySignalStore
from narrative.types import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stores:
    sticky: StickySignalStore
    history: HistoryStore


def build_stores(config: NarrativeConfig, *, clock: Callable[[], datetime] = utc_now) -> Stores:
    """JSON files under the data dir, or SQL tables when a database URL is set."""
    if config.database_url:
        engine = create_sql_engine(config.database_url)
        sticky_backend = SqlBackend(engine, StickySignalRow)
        history_backend = SqlBackend(engine, NarrativeScoreRow)
        logger.info("Using SQL storage backend")
    else:
        sticky_backend = JsonFileBackend(config.sticky_path)
        history_backend = JsonFileBackend(config.history_path)
        logger.info("Using JSON storage under %s", config.data_dir)

    return Stores(
        sticky=StickySignalStore(sticky_backend, clock=clock),
        history=HistoryStore(history_backend, clock=clock),
    )


def build_index(
    config: NarrativeConfig,
    *,
    cache: Cache | None = None,
    clock: Callable[[], datetime] = utc_now,
    stores: Stores | None = None,
) -> NarrativeIndex:
    cache = cache if cache is not None else InMemoryTTLCache()
    stores = stores or build_stores(config, clock=clock)
    http = {"cache": cache, "cache_ttl": config.cache_ttl_seconds, "timeout": config.http_timeout}

    github = GitHubClient(token=config.github_token, clock=clock, **http)
    usaspending = USASpendingClient(clock=clock, **http)
    newsapi = NewsAPIClient(api_key=config.newsapi_key, clock=clock, **http)
    polymarket = PolymarketClient(cache=cache, timeout=config.http_timeout)

    scorers: list[ComponentScorer] = [
        MarketAlphaScorer(MarketSnapshotFeed(config.market_snapshot_path), clock=clock),
        PredictionMarketScorer(polymarket, config.prediction_markets, clock=clock),
        ContractsScorer(
            usaspending,
            BreakingContractsFeed(config.breaking_contracts_path, clock=clock),
            stores.sticky,
            clock=clock,
        ),
        DeveloperActivityScorer(github, clock=clock),
    ]
    if config.include_news:
        scorers.append(NewsPlaceholderScorer(clock=clock))
    scorers += [
        FundingScorer(
            CuratedFundingDatabase(config.funding_db_path, clock=clock),
            stores.sticky,
            supplemental=[newsapi],
            clock=clock,
        ),
        ReleaseVelocityScorer(github, clock=clock),
    ]

    return NarrativeIndex(
        scorers,
        stores.history,
        stores.sticky,
        weights=active_weights(include_news=config.include_news),
        clock=clock,
        resources=[github, usaspending, newsapi, polymarket],
    )
