"""Tests for the venture funding scorer."""

from __future__ import annotations

from datetime import timedelta

import pytest

from narrative.fetchers.results import Empty, FundingRound, Ok
from narrative.scorers.funding import (
    FundingScorer,
    capped_total,
    momentum_bonus,
    momentum_label,
    recency_bonus,
    velocity_score,
)
from narrative.types import SignalType
from tests.conftest import NOW, FakeFetcher


def _round(company: str, amount: float, days_ago: int, source: str = "Curated") -> FundingRound:
    return FundingRound(
        company=company,
        amount=amount,
        date=NOW - timedelta(days=days_ago),
        source=source,
        title=f"{company} Series B",
    )


def test_capped_total():
    """Test that each round is capped at $500M."""
    rounds = [_round("A", 600_000_000, 1), _round("B", 100_000_000, 1)]
    assert capped_total(rounds) == 600_000_000


def test_velocity_score_bounds():
    """Test velocity at baseline and at both clamps."""
    assert velocity_score(400_000_000) == pytest.approx(40)
    assert velocity_score(0) == 10
    assert velocity_score(10_000_000_000) == 45


@pytest.mark.parametrize(
    "last_30, prior_60, expected",
    [
        (300_000_000, 200_000_000, 15),
        (160_000_000, 200_000_000, 10),
        (125_000_000, 200_000_000, 5),
        (90_000_000, 200_000_000, 0),
        (60_000_000, 200_000_000, -5),
        (40_000_000, 200_000_000, -15),
        (150_000_000, 50_000_000, 5),
        (50_000_000, 50_000_000, 0),
    ],
)
def test_momentum_bonus(last_30, prior_60, expected):
    """Test momentum bands against the prior monthly run-rate."""
    assert momentum_bonus(last_30, prior_60) == expected


def test_recency_bonus_capped():
    """Test 4 points per recent round up to 15."""
    assert recency_bonus(2) == 8
    assert recency_bonus(10) == 15


def test_momentum_label():
    """Test momentum labels."""
    assert "Accelerating" in momentum_label(15)
    assert "Cooling" in momentum_label(-5)


@pytest.mark.asyncio
async def test_funding_score_and_sticky(clock, sticky_store):
    """Test the composite funding score and sticky registration of large rounds."""
    primary = FakeFetcher(
        Ok(
            [
                _round("Figure AI", 200_000_000, 10),
                _round("Skild", 600_000_000, 20),
                _round("Apptronik", 100_000_000, 60),
                _round("Old Co", 900_000_000, 150),
            ]
        )
    )
    scorer = FundingScorer(primary, sticky_store, clock=clock)

    result = await scorer.score()

    # velocity 40 + 15*log2(800M/3/400M) = 31.2, momentum +5, recency 8
    assert result.score == 44
    assert result.breakdown["Momentum"] == 5
    assert result.breakdown["Recency"] == 8
    assert primary.calls == [("fetch_rounds", (180,))]
    assert sticky_store.get("funding-figure-ai") is not None
    assert sticky_store.get("funding-apptronik") is not None
    assert sticky_store.get("funding-old-co") is None


@pytest.mark.asyncio
async def test_funding_supplemental_dedupes_by_company(clock, sticky_store):
    """Test that supplemental rounds only add companies not already seen."""
    primary = FakeFetcher(Ok([_round("Figure AI", 200_000_000, 10)]))
    news = FakeFetcher(
        Ok([_round("figure ai", 200_000_000, 9, "NewsAPI"), _round("1X", 30_000_000, 5, "NewsAPI")])
    )
    scorer = FundingScorer(primary, sticky_store, supplemental=[news], clock=clock)

    result = await scorer.score()

    round_titles = [s.title for s in result.signals if s.title.startswith(("Figure", "figure", "1X"))]
    assert round_titles == ["Figure AI: $200M", "1X: $30M"]
    assert news.calls == [("fetch_rounds", (30,))]


@pytest.mark.asyncio
async def test_funding_primary_down_uses_supplemental(clock, sticky_store):
    """Test that a missing curated database falls back to supplemental sources."""
    news = FakeFetcher(Ok([_round("1X", 30_000_000, 5, "NewsAPI")]))
    scorer = FundingScorer(FakeFetcher(Empty("missing file")), sticky_store, supplemental=[news], clock=clock)

    result = await scorer.score()

    assert result.score > 0


@pytest.mark.asyncio
async def test_funding_no_sources(clock, sticky_store):
    """Test that no rounds from any source scores 0."""
    scorer = FundingScorer(
        FakeFetcher(Empty("missing file")),
        sticky_store,
        supplemental=[FakeFetcher(Empty("no api key"))],
        clock=clock,
    )

    result = await scorer.score()

    assert result.score == 0
    assert result.component is SignalType.FUNDING
