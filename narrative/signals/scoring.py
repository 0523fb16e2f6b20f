from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from narrative.signals.weights import CONFIDENCE_WEIGHTS
from narrative.types import Signal, SignalType, Trend

TREND_THRESHOLD = 2
TOP_SIGNALS = 10


@dataclass(frozen=True)
class ComponentContribution:
    """Per-component contribution to the composite."""

    component: SignalType
    score: int  # 0-100
    weight: float
    contribution: float  # weight * score


@dataclass(frozen=True)
class CompositeResult:
    overall: int  # final 0-100 score
    contributions: tuple[ComponentContribution, ...]
    explanation: str


@dataclass(frozen=True)
class ScoreInterpretation:
    label: str
    action: str
    emoji: str
    color: str


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3), unlike the built-in banker's round()."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round and clamp to the 0-100 score range."""
    if math.isnan(value):
        return 0
    return max(0, min(100, round_half_up(value)))


def combine_components(
    scores: Mapping[SignalType, int],
    weights: Mapping[SignalType, float],
) -> CompositeResult:
    """Weighted sum of component scores, rounded and clamped to 0-100.

    Components without a weight are ignored; weighted components missing
    from `scores` contribute 0.
    """
    contributions: list[ComponentContribution] = []
    accum = 0.0
    for component, weight in weights.items():
        score = max(0, min(100, int(scores.get(component, 0))))
        contribution = weight * score
        accum += contribution
        contributions.append(
            ComponentContribution(
                component=component,
                score=score,
                weight=weight,
                contribution=contribution,
            )
        )

    overall = clamp_score(accum)
    return CompositeResult(
        overall=overall,
        contributions=tuple(contributions),
        explanation=_build_explanation(overall, contributions),
    )


def _build_explanation(overall: int, contributions: list[ComponentContribution]) -> str:
    parts = [f"{c.component.value}({c.score}*{c.weight:.2f})" for c in contributions]
    return f"{' + '.join(parts)} = {overall}"


def calculate_trend(overall: int, previous: Optional[int]) -> Trend:
    """Classify the change from the previous composite; no prior means stable."""
    if previous is None:
        return "stable"
    diff = overall - previous
    if diff > TREND_THRESHOLD:
        return "up"
    if diff < -TREND_THRESHOLD:
        return "down"
    return "stable"


def calculate_confidence(
    scores: Mapping[SignalType, int],
    included: Iterable[SignalType] | None = None,
) -> float:
    """Share of confidence-weighted data slots that produced nonzero data.

    With all seven components the denominator is 8 (market alpha counts 2).
    """
    kinds = list(included) if included is not None else list(CONFIDENCE_WEIGHTS)
    total = sum(CONFIDENCE_WEIGHTS[k] for k in kinds)
    if total == 0:
        return 0.0
    present = sum(CONFIDENCE_WEIGHTS[k] for k in kinds if scores.get(k, 0) > 0)
    return present / total


def top_signals(signals: Iterable[Signal], limit: int = TOP_SIGNALS) -> tuple[Signal, ...]:
    """Strongest signals by absolute impact; ties keep their original order."""
    ranked = sorted(signals, key=lambda s: abs(s.impact), reverse=True)
    return tuple(ranked[:limit])


def interpret_score(score: float) -> ScoreInterpretation:
    if score >= 80:
        return ScoreInterpretation("STRONG NARRATIVE", "Major momentum, accumulate", "🟢", "#00FF88")
    if score >= 60:
        return ScoreInterpretation("BUILDING", "Positive signals, watch closely", "🟡", "#FFB800")
    if score >= 40:
        return ScoreInterpretation("NEUTRAL", "Mixed signals", "⚪", "#888888")
    if score >= 20:
        return ScoreInterpretation("WEAKENING", "Negative drift", "🟠", "#FF8800")
    return ScoreInterpretation("COLD", "Narrative dead", "🔴", "#FF3B3B")
