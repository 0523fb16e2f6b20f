"""Decay policy, component weights and composite scoring."""

from narrative.signals.decay import DECAY_STEPS, EXPIRY_DAYS, days_between, decay, decayed_impact
from narrative.signals.scoring import (
    CompositeResult,
    ScoreInterpretation,
    calculate_confidence,
    calculate_trend,
    clamp_score,
    combine_components,
    interpret_score,
    round_half_up,
    top_signals,
)
from narrative.signals.weights import (
    COMPONENT_WEIGHTS,
    CONFIDENCE_WEIGHTS,
    active_weights,
    normalize_weights,
)

__all__ = [
    "COMPONENT_WEIGHTS",
    "CONFIDENCE_WEIGHTS",
    "CompositeResult",
    "DECAY_STEPS",
    "EXPIRY_DAYS",
    "ScoreInterpretation",
    "active_weights",
    "calculate_confidence",
    "calculate_trend",
    "clamp_score",
    "combine_components",
    "days_between",
    "decay",
    "decayed_impact",
    "interpret_score",
    "normalize_weights",
    "round_half_up",
    "top_signals",
]
