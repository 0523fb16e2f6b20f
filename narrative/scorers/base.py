"""Component scorer contract.

Every scorer resolves to a (score, signals) pair. Failures never escape
`score()`: they become a zero score plus a "no data" signal, so missing
data is never mistaken for a neutral reading.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Iterable, Mapping, Optional

from narrative.errors import DegradedFallback, UpstreamUnavailable
from narrative.signals.scoring import clamp_score
from narrative.types import ComponentResult, Signal, SignalType, utc_now

logger = logging.getLogger(__name__)


class ComponentScorer(ABC):
    component: SignalType
    #: Prefix for generated signal ids
    signal_prefix: str
    #: Provenance label on generated signals
    source: str
    #: Human-readable name used in "no data" signals
    label: str

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    async def score(self) -> ComponentResult:
        """Compute this component; never raises."""
        try:
            result = await self._compute()
        except UpstreamUnavailable as exc:
            logger.warning("%s: no data (%s)", self.label, exc)
            return self.no_data(str(exc))
        except Exception as exc:
            logger.exception("%s scorer failed", self.label)
            return self.no_data(f"{type(exc).__name__}: {exc}")

        logger.info("%s: score=%d %s", self.label, result.score, _format_breakdown(result.breakdown))
        return result

    @abstractmethod
    async def _compute(self) -> ComponentResult:
        """Fetch inputs and apply the component formula."""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def now(self) -> datetime:
        return self._clock()

    def run_id(self) -> int:
        return int(self.now().timestamp() * 1000)

    def signal(
        self,
        key: str,
        title: str,
        description: str,
        *,
        impact: float = 0.0,
        timestamp: Optional[datetime] = None,
        url: Optional[str] = None,
        source: Optional[str] = None,
        signal_id: Optional[str] = None,
    ) -> Signal:
        return Signal(
            id=signal_id or f"{self.signal_prefix}-{key}-{self.run_id()}",
            type=self.component,
            title=title,
            description=description,
            impact=impact,
            timestamp=timestamp or self.now(),
            source=source or self.source,
            url=url,
        )

    def degraded(self, exc: DegradedFallback, title: str, *, impact: float = 0.0) -> Signal:
        logger.warning("%s degraded: %s", self.label, exc)
        return self.signal("degraded", title, exc.reason, impact=impact)

    def no_data(self, reason: str) -> ComponentResult:
        return ComponentResult(
            component=self.component,
            score=0,
            signals=(self.signal("nodata", f"No {self.label} Data", reason),),
        )

    def result(
        self,
        raw_score: float,
        signals: Iterable[Signal],
        breakdown: Mapping[str, float] | None = None,
    ) -> ComponentResult:
        return ComponentResult(
            component=self.component,
            score=clamp_score(raw_score),
            signals=tuple(signals),
            breakdown=dict(breakdown or {}),
        )


def _format_breakdown(breakdown: Mapping[str, float]) -> str:
    return ", ".join(f"{k}={v:.1f}" for k, v in breakdown.items())
