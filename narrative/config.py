"""Environment-driven configuration.

Secrets (tokens, database URL) come from the environment and must not be
logged.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_POLYMARKET_MARKETS = (
    "Tesla Optimus Release=81398621498976727589490119481788053159677593582770707348620729114209951230437"
)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class PredictionMarket:
    name: str
    token_id: str
    weight: float = 1.0


def parse_markets(raw: str) -> tuple[PredictionMarket, ...]:
    """Parse ``name=token_id[:weight]`` entries separated by commas."""
    markets: list[PredictionMarket] = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, rest = entry.partition("=")
        if not sep or not rest:
            raise ValueError(f"Invalid prediction market entry: {entry!r}")
        token_id, _, weight = rest.partition(":")
        markets.append(
            PredictionMarket(
                name=name.strip(),
                token_id=token_id.strip(),
                weight=float(weight) if weight else 1.0,
            )
        )
    return tuple(markets)


@dataclass(frozen=True)
class NarrativeConfig:
    data_dir: Path = Path("data")
    database_url: Optional[str] = None
    include_news: bool = True
    cache_ttl_seconds: int = 1800
    http_timeout: float = 10.0
    github_token: Optional[str] = None
    newsapi_key: Optional[str] = None
    prediction_markets: tuple[PredictionMarket, ...] = field(
        default_factory=lambda: parse_markets(DEFAULT_POLYMARKET_MARKETS)
    )
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None

    @property
    def sticky_path(self) -> Path:
        return self.data_dir / "sticky-signals.json"

    @property
    def history_path(self) -> Path:
        return self.data_dir / "narrative-history.json"

    @property
    def breaking_contracts_path(self) -> Path:
        return self.data_dir / "breaking-contracts.json"

    @property
    def funding_db_path(self) -> Path:
        return self.data_dir / "funding-rounds.json"

    @property
    def market_snapshot_path(self) -> Path:
        return self.data_dir / "market-snapshot.json"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "NarrativeConfig":
        env = os.environ if env is None else env
        markets_raw = env.get("POLYMARKET_TOKEN_IDS") or DEFAULT_POLYMARKET_MARKETS
        return cls(
            data_dir=Path(env.get("NARRATIVE_DATA_DIR", "data")),
            database_url=env.get("NARRATIVE_DATABASE_URL") or None,
            include_news=env.get("NARRATIVE_INCLUDE_NEWS", "true").strip().lower() in _TRUTHY,
            cache_ttl_seconds=int(env.get("NARRATIVE_CACHE_TTL_SECONDS", "1800")),
            http_timeout=float(env.get("NARRATIVE_HTTP_TIMEOUT", "10")),
            github_token=env.get("GITHUB_TOKEN") or None,
            newsapi_key=env.get("NEWSAPI_KEY") or None,
            prediction_markets=parse_markets(markets_raw),
            telegram_bot_token=env.get("TELEGRAM_BOT_TOKEN") or None,
            telegram_chat_id=env.get("TELEGRAM_CHAT_ID") or None,
        )
