"""Government contract awards.

Three sources merge additively:

1. curated breaking awards (ahead of the official feed), registered as
   sticky signals on sight
2. active sticky contract signals, decayed by age
3. the lagged official feed for the trailing 30 days

score = 30*ln(1 + total_awarded/$10M) + min(20, 20*count/10) + min(20, sum(decayed*2))
"""

from __future__ import annotations

import logging
import math

from narrative.errors import DegradedFallback, UpstreamUnavailable
from narrative.fetchers.interfaces import BreakingAwardsFetcher, ContractsFetcher
from narrative.fetchers.results import ContractAward, MalformedResponse, Ok
from narrative.formatting import format_amount, slugify
from narrative.scorers.base import ComponentScorer
from narrative.scorers.impact import CONTRACT_STICKY_THRESHOLD, contract_impact
from narrative.signals.scoring import clamp_score
from narrative.storage.sticky import StickySignalStore
from narrative.types import ComponentResult, Signal, SignalType, StickySignal

logger = logging.getLogger(__name__)

HIGH_VOLUME_THRESHOLD = 20


def award_sticky_id(award: ContractAward) -> str:
    if award.award_id:
        return f"contract-{award.award_id}"
    return f"contract-{slugify(award.recipient_name)}-{award.award_date.date().isoformat()}"


class ContractsScorer(ComponentScorer):
    component = SignalType.CONTRACT
    signal_prefix = "contracts"
    source = "USASpending.gov + Breaking"
    label = "Contracts"

    def __init__(
        self,
        official: ContractsFetcher,
        breaking: BreakingAwardsFetcher,
        sticky: StickySignalStore,
        *,
        lookback_days: int = 30,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.official = official
        self.breaking = breaking
        self.sticky = sticky
        self.lookback_days = lookback_days

    async def _compute(self) -> ComponentResult:
        now = self.now()
        signals: list[Signal] = []
        seen: set[str] = set()

        # 1. Breaking awards
        breaking_total = 0.0
        breaking_result = await self.breaking.fetch_breaking_awards()
        if isinstance(breaking_result, Ok):
            for award in breaking_result.payload:
                impact = contract_impact(award.amount)
                breaking_total += award.amount
                seen.add(award.id)
                signals.append(
                    self.signal(
                        "",
                        f"🔴 BREAKING: {award.company} ${format_amount(award.amount)}",
                        f"{award.agency}: {award.description[:60]}",
                        impact=impact,
                        timestamp=award.announced_date,
                        url=award.url,
                        source="Breaking News",
                        signal_id=award.id,
                    )
                )
                self.sticky.add(
                    StickySignal(
                        id=award.id,
                        type=SignalType.CONTRACT,
                        title=f"{award.company} ${format_amount(award.amount)}",
                        description=award.description[:100],
                        base_impact=impact,
                        amount=award.amount,
                        timestamp=award.announced_date,
                        added_at=now,
                    )
                )
        elif isinstance(breaking_result, MalformedResponse):
            signals.append(
                self.degraded(
                    DegradedFallback("Breaking contracts", breaking_result.reason),
                    "Breaking Contracts Feed Unreadable",
                )
            )

        # 2. Sticky momentum from earlier large awards
        active = self.sticky.active_signals(SignalType.CONTRACT)
        sticky_bonus = 0.0
        for entry in active:
            if entry.id in seen:
                continue
            seen.add(entry.id)
            sticky_bonus += entry.decayed_impact * 2
            signals.append(
                self.signal(
                    "",
                    f"{entry.signal.title} ({entry.days_ago}d ago)",
                    f"{entry.signal.description} "
                    f"[Impact: {entry.decayed_impact:.1f} decayed from {entry.signal.base_impact:g}]",
                    impact=entry.decayed_impact,
                    timestamp=entry.signal.timestamp,
                    source="Sticky Signal",
                    signal_id=entry.id,
                )
            )

        # 3. Official feed
        official_result = await self.official.fetch_awards(self.lookback_days)
        if isinstance(official_result, Ok):
            awards = official_result.payload
        else:
            if breaking_total == 0 and not active:
                raise UpstreamUnavailable("USASpending.gov", official_result.reason)
            awards = []
            signals.append(
                self.degraded(
                    DegradedFallback("USASpending.gov", f"official feed unavailable: {official_result.reason}"),
                    "Official Contract Feed Unavailable",
                )
            )

        official_total = sum(a.award_amount for a in awards)
        total_awarded = breaking_total + official_total
        contract_count = len(awards) + (1 if breaking_total > 0 else 0)

        dollar_volume = 30 * math.log(1 + total_awarded / 10_000_000)
        count_score = min(20, 20 * contract_count / 10)
        sticky_momentum = min(20, sticky_bonus)
        raw = dollar_volume + count_score + sticky_momentum

        signals.append(
            self.signal(
                "quant",
                f"Contracts Score: {clamp_score(raw)}",
                f"$Vol={dollar_volume:.1f} + Count={count_score:.1f} + Sticky={sticky_momentum:.1f} | "
                f"${format_amount(total_awarded)} across {contract_count} contracts",
            )
        )

        for award in awards:
            if award.award_amount < CONTRACT_STICKY_THRESHOLD:
                continue
            sticky_id = award_sticky_id(award)
            impact = contract_impact(award.award_amount)
            self.sticky.add(
                StickySignal(
                    id=sticky_id,
                    type=SignalType.CONTRACT,
                    title=f"${format_amount(award.award_amount)} Contract",
                    description=f"{award.recipient_name}: {award.description[:60]}",
                    base_impact=impact,
                    amount=award.award_amount,
                    timestamp=award.award_date,
                    added_at=now,
                )
            )
            if sticky_id in seen:
                continue
            seen.add(sticky_id)
            signals.append(
                self.signal(
                    "",
                    f"${format_amount(award.award_amount)} Contract Awarded",
                    f"{award.recipient_name}: {award.description[:80]}",
                    impact=impact,
                    timestamp=award.award_date,
                    source="USASpending.gov",
                    signal_id=sticky_id,
                )
            )

        if len(awards) > HIGH_VOLUME_THRESHOLD:
            signals.append(
                self.signal(
                    "volume",
                    "High Contract Volume",
                    f"{len(awards)} robotics contracts in last {self.lookback_days} days",
                    impact=1.5,
                    source="USASpending.gov",
                )
            )

        breakdown = {"$Vol": dollar_volume, "Count": count_score, "Sticky": sticky_momentum}
        return self.result(raw, signals, breakdown)
