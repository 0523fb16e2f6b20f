"""Pydantic models for the upstream payloads we consume.

Only the fields the engine reads are declared; everything else in the
upstream JSON is ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from narrative.types import parse_timestamp


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def _to_utc(value: object) -> object:
    if isinstance(value, str) and value:
        return parse_timestamp(value)
    return value


UtcDatetime = Annotated[datetime, BeforeValidator(_to_utc)]


# --- GitHub ----------------------------------------------------------------


class GitHubRepo(_Upstream):
    name: str
    stargazers_count: int = 0


class CommitWeek(_Upstream):
    week: int
    total: int = 0


class GitHubRelease(_Upstream):
    tag_name: str = ""
    name: Optional[str] = None
    published_at: Optional[UtcDatetime] = None
    body: Optional[str] = None
    html_url: str = ""
    draft: bool = False


# --- USASpending -----------------------------------------------------------


class SpendingAward(_Upstream):
    award_id: Optional[str] = Field(default=None, alias="Award ID")
    recipient_name: str = Field(default="Unknown recipient", alias="Recipient Name")
    award_amount: float = Field(default=0.0, alias="Award Amount")
    description: Optional[str] = Field(default="", alias="Description")
    start_date: Optional[UtcDatetime] = Field(default=None, alias="Start Date")
    agency: Optional[str] = Field(default="", alias="Awarding Agency")

    @field_validator("award_amount", mode="before")
    @classmethod
    def _none_is_zero(cls, value: object) -> object:
        return 0.0 if value is None else value


class SpendingByAwardResponse(_Upstream):
    results: list[SpendingAward] = Field(default_factory=list)


# --- NewsAPI ---------------------------------------------------------------


class NewsSource(_Upstream):
    name: str = ""


class NewsArticle(_Upstream):
    title: str = ""
    description: Optional[str] = None
    source: NewsSource = Field(default_factory=NewsSource)
    published_at: UtcDatetime = Field(alias="publishedAt")
    url: str = ""


class NewsResponse(_Upstream):
    status: str
    articles: list[NewsArticle] = Field(default_factory=list)


# --- Polymarket CLOB -------------------------------------------------------


class ClobPrice(_Upstream):
    price: float = Field(ge=0.0, le=1.0)


# --- Curated JSON feeds ----------------------------------------------------


class BreakingContractEntry(_Upstream):
    id: str
    company: str
    amount: float
    agency: str = ""
    description: str = ""
    announced_date: UtcDatetime = Field(alias="announcedDate")
    url: Optional[str] = None


class BreakingContractsFile(_Upstream):
    contracts: list[BreakingContractEntry] = Field(default_factory=list)


class CuratedRound(_Upstream):
    company: str
    amount: float
    date: UtcDatetime
    round: str = ""
    description: str = ""
    url: Optional[str] = None


class FundingDatabaseFile(_Upstream):
    rounds: list[CuratedRound] = Field(default_factory=list)


class SnapshotPoint(_Upstream):
    date: UtcDatetime
    close: float = Field(gt=0)


class MarketSnapshotFile(_Upstream):
    index: list[SnapshotPoint] = Field(default_factory=list)
    benchmark: list[SnapshotPoint] = Field(default_factory=list)
    constituent_changes: list[float] = Field(default_factory=list, alias="constituentChanges")
    benchmark_symbol: str = Field(default="URTH", alias="benchmarkSymbol")
