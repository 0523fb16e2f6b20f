from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Literal, Mapping, Optional

Trend = Literal["up", "down", "stable"]


class SignalType(str, Enum):
    """Component kinds; each scorer owns exactly one."""

    MARKET_ALPHA = "market_alpha"
    PREDICTION_MARKET = "prediction_market"
    CONTRACT = "contract"
    DEVELOPER_ACTIVITY = "developer_activity"
    NEWS = "news"
    FUNDING = "funding"
    RELEASE_VELOCITY = "release_velocity"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | datetime | date) -> datetime:
    """Parse an ISO-8601 timestamp or date into an aware UTC datetime.

    Accepts a trailing ``Z`` and bare ``YYYY-MM-DD`` dates (midnight UTC).
    Naive datetimes are assumed to be UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Signal:
    """One piece of supporting evidence attached to a score.

    `impact` is informational (roughly -10..+10); it ranks signals but is
    not summed into the composite.
    """

    id: str
    type: SignalType
    title: str
    description: str
    impact: float
    timestamp: datetime
    source: str
    url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "timestamp": format_timestamp(self.timestamp),
            "source": self.source,
        }
        if self.url:
            data["url"] = self.url
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Signal":
        return cls(
            id=str(data["id"]),
            type=SignalType(data["type"]),
            title=str(data["title"]),
            description=str(data.get("description", "")),
            impact=float(data["impact"]),
            timestamp=parse_timestamp(data["timestamp"]),
            source=str(data.get("source", "")),
            url=data.get("url"),
        )


@dataclass(frozen=True)
class StickySignal:
    """Durable record of a large discrete event (contract award, funding round).

    `id` is derived from the event itself so repeated detection is idempotent.
    `timestamp` is when the event happened; `added_at` is when we first saw it.
    """

    id: str
    type: SignalType
    title: str
    description: str
    base_impact: float
    timestamp: datetime
    added_at: datetime
    amount: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "base_impact": self.base_impact,
            "timestamp": format_timestamp(self.timestamp),
            "added_at": format_timestamp(self.added_at),
        }
        if self.amount is not None:
            data["amount"] = self.amount
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StickySignal":
        amount = data.get("amount")
        return cls(
            id=str(data["id"]),
            type=SignalType(data["type"]),
            title=str(data["title"]),
            description=str(data.get("description", "")),
            base_impact=float(data["base_impact"]),
            timestamp=parse_timestamp(data["timestamp"]),
            added_at=parse_timestamp(data["added_at"]),
            amount=float(amount) if amount is not None else None,
        )


@dataclass(frozen=True)
class ActiveStickySignal:
    """A sticky signal as seen at query time, with its decay applied."""

    signal: StickySignal
    days_ago: int
    decayed_impact: float

    @property
    def id(self) -> str:
        return self.signal.id

    @property
    def type(self) -> SignalType:
        return self.signal.type


@dataclass(frozen=True)
class ComponentResult:
    """Output of a single component scorer."""

    component: SignalType
    score: int  # 0-100
    signals: tuple[Signal, ...] = ()
    breakdown: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class NarrativeScore:
    """Composite record produced once per aggregation run. Immutable."""

    id: str
    timestamp: datetime
    overall: int
    components: Mapping[str, int]
    trend: Trend
    confidence: float
    signals: tuple[Signal, ...] = ()

    def component(self, kind: SignalType) -> int:
        return int(self.components.get(kind.value, 0))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": format_timestamp(self.timestamp),
            "overall": self.overall,
            "components": dict(self.components),
            "trend": self.trend,
            "confidence": self.confidence,
            "signals": [s.to_dict() for s in self.signals],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NarrativeScore":
        trend = data.get("trend", "stable")
        if trend not in ("up", "down", "stable"):
            raise ValueError(f"invalid trend: {trend!r}")
        return cls(
            id=str(data["id"]),
            timestamp=parse_timestamp(data["timestamp"]),
            overall=int(data["overall"]),
            components={str(k): int(v) for k, v in dict(data.get("components", {})).items()},
            trend=trend,
            confidence=float(data.get("confidence", 0.0)),
            signals=tuple(Signal.from_dict(s) for s in data.get("signals", [])),
        )
