from __future__ import annotations

from narrative.scorers.base import ComponentScorer
from narrative.types import ComponentResult, SignalType

# Below neutral: this is an estimate, not a measurement.
BASELINE_SCORE = 45


class NewsPlaceholderScorer(ComponentScorer):
    """Fixed news-sentiment baseline until sentiment is actually measured."""

    component = SignalType.NEWS
    signal_prefix = "news"
    source = "Estimate"
    label = "News"

    def __init__(self, *, baseline: int = BASELINE_SCORE, **kwargs) -> None:
        super().__init__(**kwargs)
        self.baseline = baseline

    async def _compute(self) -> ComponentResult:
        estimate = self.signal(
            "estimate",
            "News Data Estimated",
            "Using baseline estimate, sentiment is not measured yet",
        )
        return self.result(self.baseline, [estimate], {"Baseline": self.baseline})
