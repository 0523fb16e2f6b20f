"""Composite narrative score.

One `compute()` call is one aggregation cycle:

1. run every component scorer concurrently and wait for all of them
2. keep the 10 strongest signals by |impact|
3. weighted sum of component scores, rounded and clamped to 0-100
4. trend against the most recent score from the last day
5. confidence from which components produced data
6. append to history, then expire old sticky signals

Usage:
    index = build_index(NarrativeConfig.from_env())
    score = await index.compute()
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional, Protocol, Sequence

from narrative.scorers.base import ComponentScorer
from narrative.signals.scoring import (
    CompositeResult,
    calculate_confidence,
    calculate_trend,
    combine_components,
    top_signals,
)
from narrative.signals.weights import active_weights
from narrative.storage.history import HistoryStore
from narrative.storage.sticky import StickySignalStore
from narrative.types import ComponentResult, NarrativeScore, SignalType, utc_now

logger = logging.getLogger(__name__)

PRIOR_SCORE_WINDOW_DAYS = 1


class Closeable(Protocol):
    async def close(self) -> None: ...


@dataclass(frozen=True)
class AggregationRun:
    """A computed score plus what happened while producing it."""

    score: NarrativeScore
    components: Mapping[SignalType, ComponentResult]
    composite: CompositeResult
    previous: Optional[NarrativeScore]
    persisted: bool


class NarrativeIndex:
    def __init__(
        self,
        scorers: Sequence[ComponentScorer],
        history: HistoryStore,
        sticky: StickySignalStore,
        *,
        weights: Mapping[SignalType, float] | None = None,
        clock: Callable[[], datetime] = utc_now,
        resources: Sequence[Closeable] = (),
    ) -> None:
        kinds = [s.component for s in scorers]
        if len(set(kinds)) != len(kinds):
            raise ValueError(f"duplicate component scorers: {kinds}")
        self.scorers = tuple(scorers)
        self.history = history
        self.sticky = sticky
        self.weights = dict(weights) if weights is not None else active_weights()
        self._clock = clock
        self._resources = tuple(resources)

    async def close(self) -> None:
        """Release upstream clients owned by this index."""
        for resource in self._resources:
            await resource.close()

    async def compute(self) -> NarrativeScore:
        """Run one aggregation cycle and return the appended record."""
        return (await self.run()).score

    async def run(self) -> AggregationRun:
        started = time.monotonic()

        # Scorers add sticky signals concurrently; write them back once
        with self.sticky.batched():
            results: list[ComponentResult] = await asyncio.gather(*(s.score() for s in self.scorers))
        by_kind = {r.component: r for r in results}
        scores = {kind: r.score for kind, r in by_kind.items()}

        # Scorer order is the tie-break for equal |impact|
        merged = [sig for r in results for sig in r.signals]
        signals = top_signals(merged)

        composite = combine_components(scores, self.weights)

        recent = self.history.query(PRIOR_SCORE_WINDOW_DAYS)
        previous = recent[-1] if recent else None
        trend = calculate_trend(composite.overall, previous.overall if previous else None)
        confidence = calculate_confidence(scores, included=self.weights.keys())

        now = self._clock()
        record = NarrativeScore(
            id=f"rni-{int(now.timestamp() * 1000)}",
            timestamp=now,
            overall=composite.overall,
            components={kind.value: scores.get(kind, 0) for kind in self.weights},
            trend=trend,
            confidence=confidence,
            signals=signals,
        )

        persisted = self.history.append(record)
        if not persisted:
            logger.warning("Narrative score %s computed but not persisted", record.id)
        self.sticky.cleanup()

        logger.info(
            "Narrative index computed in %dms: %d (%s, confidence %.2f) | %s",
            (time.monotonic() - started) * 1000,
            record.overall,
            record.trend,
            record.confidence,
            composite.explanation,
        )
        return AggregationRun(
            score=record,
            components=by_kind,
            composite=composite,
            previous=previous,
            persisted=persisted,
        )
