"""Tagged fetch results and the payload types upstream adapters produce."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Literal, Optional, TypeVar, Union

from narrative.errors import UpstreamUnavailable

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    payload: T


@dataclass(frozen=True)
class Empty:
    """Upstream failed or had nothing to report."""

    reason: str


@dataclass(frozen=True)
class MalformedResponse:
    """Upstream answered with something we could not parse."""

    reason: str


FetchResult = Union[Ok[T], Empty, MalformedResponse]


def unwrap(result: FetchResult[T], source: str) -> T:
    """Return the payload of an `Ok`, raise `UpstreamUnavailable` otherwise."""
    if isinstance(result, Ok):
        return result.payload
    if isinstance(result, MalformedResponse):
        raise UpstreamUnavailable(source, f"malformed response: {result.reason}")
    raise UpstreamUnavailable(source, result.reason)


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrgActivity:
    org: str
    weekly_commits: int
    monthly_commits: int
    stars_total: int
    trend: Literal["up", "down", "stable"]


@dataclass(frozen=True)
class ContractAward:
    """Award from the official (lagged) federal spending feed."""

    recipient_name: str
    award_amount: float
    description: str
    award_date: datetime
    award_id: Optional[str] = None
    agency: str = ""


@dataclass(frozen=True)
class BreakingAward:
    """Manually curated award announced ahead of the official feed."""

    id: str
    company: str
    amount: float
    agency: str
    description: str
    announced_date: datetime
    url: Optional[str] = None


@dataclass(frozen=True)
class FundingRound:
    company: str
    amount: float
    date: datetime
    source: str
    url: Optional[str] = None
    title: str = ""


@dataclass(frozen=True)
class PricePoint:
    date: datetime
    close: float


@dataclass(frozen=True)
class MarketSnapshot:
    """Price history for the tracked index and its benchmark.

    Both histories are ordered oldest first. `constituent_changes` holds
    today's percent change of each index member, used when the index
    history is missing.
    """

    index_history: tuple[PricePoint, ...] = ()
    benchmark_history: tuple[PricePoint, ...] = ()
    constituent_changes: tuple[float, ...] = ()
    benchmark_symbol: str = "URTH"


@dataclass(frozen=True)
class Release:
    org: str
    repo: str
    version: str
    name: str
    date: datetime
    notes: str
    url: str
    is_major: bool
