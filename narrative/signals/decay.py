"""Step-function decay for sticky signals.

Big events are modelled as news cycles: full weight on the day, then a few
sharp drops, then gone after a month. There is no interpolation between
buckets.
"""

from __future__ import annotations

import math
from datetime import datetime

# (max days_ago inclusive, multiplier); anything older decays to 0.
DECAY_STEPS: tuple[tuple[int, float], ...] = (
    (0, 1.00),
    (1, 0.85),
    (3, 0.60),
    (7, 0.30),
    (14, 0.10),
    (30, 0.05),
)

EXPIRY_DAYS = 30


def decay(days_ago: float) -> float:
    """Return the decay multiplier in [0, 1] for an event `days_ago` old."""
    for max_days, multiplier in DECAY_STEPS:
        if days_ago <= max_days:
            return multiplier
    return 0.0


def decayed_impact(base_impact: float, days_ago: float) -> float:
    return base_impact * decay(days_ago)


def days_between(then: datetime, now: datetime) -> int:
    """Whole days elapsed from `then` to `now` (floored; negative for future events)."""
    return math.floor((now - then).total_seconds() / 86400)
