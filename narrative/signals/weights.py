"""Fixed component weights for the composite score.

Usage:
    from narrative.signals.weights import active_weights

    weights = active_weights(include_news=True)   # the fixed seven
    weights = active_weights(include_news=False)  # six, renormalized to 1.0
"""

from __future__ import annotations

import logging

from narrative.types import SignalType

logger = logging.getLogger(__name__)

COMPONENT_WEIGHTS: dict[SignalType, float] = {
    SignalType.MARKET_ALPHA: 0.30,
    SignalType.PREDICTION_MARKET: 0.15,
    SignalType.CONTRACT: 0.15,
    SignalType.DEVELOPER_ACTIVITY: 0.10,
    SignalType.NEWS: 0.10,
    SignalType.FUNDING: 0.10,
    SignalType.RELEASE_VELOCITY: 0.10,
}

# Data-presence weights for confidence; market alpha counts double.
CONFIDENCE_WEIGHTS: dict[SignalType, int] = {
    kind: (2 if kind is SignalType.MARKET_ALPHA else 1) for kind in COMPONENT_WEIGHTS
}


def normalize_weights(weights: dict[SignalType, float]) -> dict[SignalType, float]:
    """Normalize weights to sum to 1.0.

    Raises:
        ValueError: If total weight is <= 0
    """
    total = sum(weights.values())
    if total <= 0:
        raise ValueError("weights total must be > 0")
    return {k: v / total for k, v in weights.items()}


def active_weights(include_news: bool = True) -> dict[SignalType, float]:
    """Weights for the components that take part in the composite.

    Dropping the news placeholder renormalizes the remaining six so they
    still sum to 1.0.
    """
    if include_news:
        return dict(COMPONENT_WEIGHTS)
    remaining = {k: v for k, v in COMPONENT_WEIGHTS.items() if k is not SignalType.NEWS}
    normalized = normalize_weights(remaining)
    logger.debug("News component excluded, renormalized weights: %s", normalized)
    return normalized
