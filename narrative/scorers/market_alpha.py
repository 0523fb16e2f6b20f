"""Multi-window alpha of the robotics index against a broad benchmark.

weighted = 0.40*alpha_1d + 0.35*alpha_5d + 0.25*alpha_20d, in percent,
mapped to 0..100 through a piecewise-linear curve, then adjusted for
conviction (all windows agree) and acceleration.
"""

from __future__ import annotations

import logging
import statistics
from typing import Optional, Sequence

from narrative.errors import DegradedFallback, UpstreamUnavailable
from narrative.fetchers.interfaces import MarketFetcher
from narrative.fetchers.results import MarketSnapshot, Ok, PricePoint
from narrative.formatting import signed
from narrative.scorers.base import ComponentScorer
from narrative.types import ComponentResult, Signal, SignalType

logger = logging.getLogger(__name__)

WINDOW_WEIGHTS = (0.40, 0.35, 0.25)

# MSCI World long-run average (~10%/yr) for 1, 5 and 20 trading days.
HISTORICAL_BENCHMARK = (0.04, 0.2, 0.8)

# Single-day extrapolation factors for 5d and 20d when index history is missing
EXTRAPOLATE_5D = 3.5
EXTRAPOLATE_20D = 10.0

Returns = tuple[float, float, float]


def _pct(latest: float, base: float) -> float:
    return (latest - base) / base * 100


def window_returns(history: Sequence[PricePoint], *, extrapolate_20d: bool = False) -> Optional[Returns]:
    """1/5/20-period percent returns from an oldest-first close series.

    Windows without enough history return 0, except that with
    `extrapolate_20d` a 7-20 point series projects its average per-period
    return out to 20 periods.
    """
    closes = [p.close for p in history]
    n = len(closes)
    if n < 2:
        return None
    latest = closes[-1]
    r1 = _pct(latest, closes[-2])
    r5 = _pct(latest, closes[-6]) if n >= 6 else 0.0
    if n >= 21:
        r20 = _pct(latest, closes[-21])
    elif extrapolate_20d and n > 6:
        r20 = _pct(latest, closes[0]) / n * 20
    else:
        r20 = 0.0
    return r1, r5, r20


def alpha_to_score(alpha: float) -> float:
    """Piecewise-linear map from weighted alpha (%) to a 0..100 base score."""
    if alpha <= -5:
        return 5.0
    if alpha <= -3:
        return 5 + (alpha + 5) / 2 * 20
    if alpha <= -1:
        return 25 + (alpha + 3) / 2 * 15
    if alpha <= 0:
        return 40 + (alpha + 1) * 10
    if alpha <= 1:
        return 50 + alpha * 10
    if alpha <= 3:
        return 60 + (alpha - 1) / 2 * 15
    if alpha <= 5:
        return 75 + (alpha - 3) / 2 * 15
    return 90 + min(10.0, (alpha - 5) * 2)


def weighted_alpha(alphas: Returns) -> float:
    return sum(a * w for a, w in zip(alphas, WINDOW_WEIGHTS))


class MarketAlphaScorer(ComponentScorer):
    component = SignalType.MARKET_ALPHA
    signal_prefix = "alpha"
    source = "Index Alpha"
    label = "Index Alpha"

    def __init__(self, fetcher: MarketFetcher, **kwargs) -> None:
        super().__init__(**kwargs)
        self.fetcher = fetcher

    def _index_returns(self, snapshot: MarketSnapshot, signals: list[Signal]) -> Returns:
        returns = window_returns(snapshot.index_history, extrapolate_20d=True)
        if returns is not None:
            return returns

        if not snapshot.constituent_changes:
            raise UpstreamUnavailable(self.source, "no index history or constituent data")

        r1 = statistics.median(snapshot.constituent_changes)
        signals.append(
            self.degraded(
                DegradedFallback(self.source, "No index history, using single-day extrapolation"),
                "Using Approximated Returns",
            )
        )
        return r1, r1 * EXTRAPOLATE_5D, r1 * EXTRAPOLATE_20D

    def _benchmark_returns(self, snapshot: MarketSnapshot, signals: list[Signal]) -> tuple[Returns, bool]:
        returns = window_returns(snapshot.benchmark_history)
        if returns is not None:
            return returns, True
        signals.append(
            self.degraded(
                DegradedFallback(self.source, "Benchmark data unavailable, using 10% annual average"),
                "Using Historical Benchmark",
            )
        )
        return HISTORICAL_BENCHMARK, False

    async def _compute(self) -> ComponentResult:
        result = await self.fetcher.fetch_snapshot()
        if not isinstance(result, Ok):
            raise UpstreamUnavailable(self.source, result.reason)
        snapshot = result.payload

        signals: list[Signal] = []
        index = self._index_returns(snapshot, signals)
        benchmark, has_benchmark = self._benchmark_returns(snapshot, signals)

        a1, a5, a20 = alphas = (index[0] - benchmark[0], index[1] - benchmark[1], index[2] - benchmark[2])
        alpha = weighted_alpha(alphas)
        base = alpha_to_score(alpha)

        conviction = 0
        if a1 > 0 and a5 > 0 and a20 > 0:
            conviction = 5
            signals.append(
                self.signal(
                    "momentum-up",
                    "Positive Momentum Alignment",
                    "Robotics outperforming across all timeframes",
                    impact=2,
                )
            )
        elif a1 < 0 and a5 < 0 and a20 < 0:
            conviction = -5
            signals.append(
                self.signal(
                    "momentum-down",
                    "Negative Momentum Alignment",
                    "Robotics underperforming across all timeframes",
                    impact=-2,
                )
            )

        # Acceleration compares per-day averages of each window
        per_day_5, per_day_20 = a5 / 5, a20 / 20
        acceleration = 0
        if a1 > per_day_5 > per_day_20 and a1 > 0:
            acceleration = 3
            signals.append(
                self.signal(
                    "accelerating",
                    "Alpha Accelerating",
                    f"Outperformance increasing: 1D={a1:.2f}% > 5D={per_day_5:.2f}%/day",
                    impact=1.5,
                )
            )
        elif a1 < per_day_5 < per_day_20 and a1 < 0:
            acceleration = -3

        raw = base + conviction + acceleration
        benchmark_desc = snapshot.benchmark_symbol if has_benchmark else "historical avg"
        signals.append(
            self.signal(
                "summary",
                f"Weighted Alpha: {signed(alpha)}% vs {benchmark_desc}",
                f"1D: {signed(a1)}% | 5D: {signed(a5)}% | 20D: {signed(a20)}%",
                impact=2 if alpha > 1 else -2 if alpha < -1 else 0,
            )
        )

        breakdown = {"Alpha": alpha, "Base": base, "Conviction": conviction, "Acceleration": acceleration}
        return self.result(raw, signals, breakdown)
