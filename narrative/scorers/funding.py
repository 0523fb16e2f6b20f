"""Venture funding flow.

score = velocity (10..45) + momentum (-15..+15) + recency (0..15)

Rounds are capped at $500M before summing so one mega-round cannot
dominate. Velocity compares the 90-day monthly run-rate against a $400M/mo
baseline on a log2 scale.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from narrative.errors import UpstreamUnavailable
from narrative.fetchers.interfaces import FundingFetcher
from narrative.fetchers.results import FundingRound, Ok
from narrative.formatting import format_amount, slugify
from narrative.scorers.base import ComponentScorer
from narrative.scorers.impact import FUNDING_STICKY_THRESHOLD, funding_impact
from narrative.signals.decay import days_between
from narrative.signals.scoring import clamp_score
from narrative.storage.sticky import StickySignalStore
from narrative.types import ComponentResult, Signal, SignalType, StickySignal

logger = logging.getLogger(__name__)

ROUND_CAP = 500_000_000
BASELINE_MONTHLY = 400_000_000
MIN_PRIOR_MONTHLY = 50_000_000
STRONG_RECENT_TOTAL = 100_000_000

# (minimum last-30 / prior-monthly ratio, bonus), checked in order
MOMENTUM_BANDS: tuple[tuple[float, int], ...] = (
    (2.0, 15),
    (1.5, 10),
    (1.2, 5),
    (0.8, 0),
    (0.5, -5),
)
MOMENTUM_FLOOR = -15


def capped_total(rounds: Sequence[FundingRound]) -> float:
    return sum(min(r.amount, ROUND_CAP) for r in rounds)


def velocity_score(monthly_velocity: float) -> float:
    ratio = max(0.1, monthly_velocity / BASELINE_MONTHLY)
    return min(45.0, max(10.0, 40 + 15 * math.log2(ratio)))


def momentum_bonus(last_30_total: float, prior_60_total: float) -> int:
    """Compare the last 30 days with the monthly run-rate of days 31-90."""
    prior_monthly = prior_60_total / 2
    if prior_monthly > MIN_PRIOR_MONTHLY:
        ratio = last_30_total / prior_monthly
        for threshold, bonus in MOMENTUM_BANDS:
            if ratio >= threshold:
                return bonus
        return MOMENTUM_FLOOR
    if last_30_total > STRONG_RECENT_TOTAL:
        return 5
    return 0


def recency_bonus(rounds_last_30: int) -> int:
    return min(15, 4 * rounds_last_30)


def momentum_label(bonus: int) -> str:
    if bonus > 10:
        return "🚀 Accelerating"
    if bonus > 0:
        return "📈 Growing"
    if bonus == 0:
        return "➡️ Stable"
    return "📉 Cooling"


class FundingScorer(ComponentScorer):
    component = SignalType.FUNDING
    signal_prefix = "funding"
    source = "Quant Formula"
    label = "Funding"

    def __init__(
        self,
        primary: FundingFetcher,
        sticky: StickySignalStore,
        *,
        supplemental: Sequence[FundingFetcher] = (),
        history_days: int = 180,
        supplemental_days: int = 30,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.primary = primary
        self.supplemental = tuple(supplemental)
        self.sticky = sticky
        self.history_days = history_days
        self.supplemental_days = supplemental_days

    async def _load_rounds(self) -> list[FundingRound]:
        """Curated rounds first, then supplemental rounds for companies not yet seen."""
        rounds: list[FundingRound] = []
        reasons: list[str] = []

        result = await self.primary.fetch_rounds(self.history_days)
        if isinstance(result, Ok):
            rounds.extend(result.payload)
        else:
            reasons.append(result.reason)

        known = {r.company.lower() for r in rounds}
        for fetcher in self.supplemental:
            extra = await fetcher.fetch_rounds(self.supplemental_days)
            if not isinstance(extra, Ok):
                logger.info("Supplemental funding source skipped: %s", extra.reason)
                reasons.append(extra.reason)
                continue
            for r in extra.payload:
                if r.company.lower() not in known:
                    known.add(r.company.lower())
                    rounds.append(r)

        if not rounds:
            raise UpstreamUnavailable("Funding", "; ".join(reasons) or "no funding rounds")
        return rounds

    async def _compute(self) -> ComponentResult:
        now = self.now()
        rounds = await self._load_rounds()

        aged = [(r, days_between(r.date, now)) for r in rounds]
        last_30 = [r for r, d in aged if d <= 30]
        prior_60 = [r for r, d in aged if 30 < d <= 90]
        last_90 = [(r, d) for r, d in aged if d <= 90]

        monthly_velocity = capped_total([r for r, _ in last_90]) / 3
        velocity = velocity_score(monthly_velocity)
        momentum = momentum_bonus(capped_total(last_30), capped_total(prior_60))
        recency = recency_bonus(len(last_30))
        raw = velocity + momentum + recency

        signals: list[Signal] = []
        for entry in self.sticky.active_signals(SignalType.FUNDING):
            decay_pct = round(entry.decayed_impact / entry.signal.base_impact * 100)
            signals.append(
                self.signal(
                    "",
                    f"{entry.signal.title} ({entry.days_ago}d ago, {decay_pct}% decay)",
                    entry.signal.description,
                    impact=entry.decayed_impact,
                    timestamp=entry.signal.timestamp,
                    source="Sticky Signal",
                    signal_id=entry.id,
                )
            )

        for r, days_ago in last_90:
            slug = slugify(r.company)
            if r.amount >= FUNDING_STICKY_THRESHOLD:
                self.sticky.add(
                    StickySignal(
                        id=f"funding-{slug}",
                        type=SignalType.FUNDING,
                        title=f"{r.company} ${format_amount(r.amount)}",
                        description=r.title or "Series funding round",
                        base_impact=funding_impact(r.amount),
                        amount=r.amount,
                        timestamp=r.date,
                        added_at=now,
                    )
                )
            signals.append(
                self.signal(
                    slug,
                    f"{r.company}: ${format_amount(r.amount)}",
                    f"{days_ago}d ago via {r.source}" if r.source else f"{days_ago} days ago",
                    impact=2 if r.amount >= 100_000_000 else 1 if r.amount >= 50_000_000 else 0,
                    timestamp=r.date,
                    source=r.source or "NewsAPI",
                    url=r.url,
                )
            )

        signals.append(
            self.signal(
                "quant",
                f"Funding Score: {clamp_score(raw)} {momentum_label(momentum)}",
                f"Velocity={velocity:.0f} + Momentum={momentum:+d} + Recency={recency} | "
                f"${format_amount(monthly_velocity)}/mo vs ${format_amount(BASELINE_MONTHLY)} baseline",
                impact=1 if momentum > 0 else -1 if momentum < 0 else 0,
            )
        )

        breakdown = {"Velocity": velocity, "Momentum": momentum, "Recency": recency}
        return self.result(raw, signals, breakdown)
