"""Tests for the developer-activity, release, news and prediction-market scorers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from narrative.config import PredictionMarket
from narrative.fetchers.results import Empty, MalformedResponse, Ok, OrgActivity, Release
from narrative.scorers import (
    DeveloperActivityScorer,
    NewsPlaceholderScorer,
    PredictionMarketScorer,
    ReleaseVelocityScorer,
)
from narrative.types import SignalType
from tests.conftest import NOW, FakeFetcher, FakePriceFetcher


def _orgs() -> list[OrgActivity]:
    trends = ["up"] * 6 + ["down"] + ["stable"] * 3
    return [
        OrgActivity(org=f"org{i}", weekly_commits=35, monthly_commits=140, stars_total=100, trend=trend)
        for i, trend in enumerate(trends)
    ]


def _release(org: str, version: str, *, major: bool, days_ago: int = 1) -> Release:
    return Release(
        org=org,
        repo="sdk",
        version=version,
        name=version,
        date=NOW - timedelta(days=days_ago),
        notes="Release notes",
        url=f"https://github.com/{org}/sdk/releases/{version}",
        is_major=major,
    )


@pytest.mark.asyncio
async def test_developer_activity_worked_example(clock):
    """Test 350 commits over 10 active orgs, 6 up and 1 down, scores 72."""
    scorer = DeveloperActivityScorer(FakeFetcher(Ok(_orgs())), clock=clock)

    result = await scorer.score()

    assert result.component is SignalType.DEVELOPER_ACTIVITY
    assert result.score == 72
    assert result.breakdown["V"] == pytest.approx(41.59, abs=0.01)
    assert result.breakdown["M"] == pytest.approx(10)
    assert result.breakdown["B"] == pytest.approx(20)
    assert result.signals[-1].title == "GitHub Score: 72"


@pytest.mark.asyncio
async def test_developer_activity_no_orgs(clock):
    """Test that an empty leaderboard scores 0 with a no-data signal."""
    result = await DeveloperActivityScorer(FakeFetcher(Ok([])), clock=clock).score()

    assert result.score == 0
    assert result.signals[0].title == "No GitHub Data"


@pytest.mark.asyncio
async def test_developer_activity_fetch_raises(clock):
    """Test that an exception from the fetcher becomes a zero score."""
    fetcher = FakeFetcher(error=RuntimeError("connection reset"))

    result = await DeveloperActivityScorer(fetcher, clock=clock).score()

    assert result.score == 0
    assert "connection reset" in result.signals[0].description


@pytest.mark.asyncio
async def test_developer_activity_malformed(clock):
    """Test that a malformed response is treated as missing data."""
    result = await DeveloperActivityScorer(FakeFetcher(MalformedResponse("bad json")), clock=clock).score()
    assert result.score == 0


@pytest.mark.asyncio
async def test_release_velocity_score(clock):
    """Test release velocity, major bonus and breadth."""
    releases = [
        _release("ros2", "v2.0.0", major=True),
        _release("isaac", "v1.0.0", major=True),
        _release("isaac", "v1.0.1", major=False),
        _release("mujoco", "3.1.2", major=False),
        _release("lerobot", "v0.4.1", major=False),
    ]
    fetcher = FakeFetcher(Ok(releases))

    result = await ReleaseVelocityScorer(fetcher, clock=clock).score()

    # 30*ln(2) + 20 + 20*4/11 = 20.79 + 20 + 7.27 = 48.07
    assert result.score == 48
    assert fetcher.calls == [("fetch_releases", (30,))]
    major_ids = [s.id for s in result.signals if s.id.startswith("release-")]
    assert major_ids == ["release-ros2-v2.0.0", "release-isaac-v1.0.0"]


@pytest.mark.asyncio
async def test_release_velocity_major_bonus_capped(clock):
    """Test that only three major releases are surfaced and the bonus caps at 30."""
    releases = [_release(f"org{i}", "v1.0.0", major=True) for i in range(5)]

    result = await ReleaseVelocityScorer(FakeFetcher(Ok(releases)), clock=clock).score()

    assert result.breakdown["Major"] == 30
    assert len([s for s in result.signals if s.id.startswith("release-")]) == 3


@pytest.mark.asyncio
async def test_release_velocity_empty(clock):
    """Test that no releases in the window scores 0."""
    result = await ReleaseVelocityScorer(FakeFetcher(Ok([])), clock=clock).score()
    assert result.score == 0


@pytest.mark.asyncio
async def test_news_placeholder(clock):
    """Test the fixed news baseline."""
    result = await NewsPlaceholderScorer(clock=clock).score()

    assert result.score == 45
    assert result.signals[0].title == "News Data Estimated"


@pytest.mark.asyncio
async def test_prediction_market_weighted_average(clock):
    """Test weighted probability across markets."""
    markets = [PredictionMarket("A", "1", 1.0), PredictionMarket("B", "2", 3.0)]
    fetcher = FakePriceFetcher({"1": Ok(0.20), "2": Ok(0.40)})

    result = await PredictionMarketScorer(fetcher, markets, clock=clock).score()

    assert result.score == 35
    assert [s.title for s in result.signals] == ["A: 20.0%", "B: 40.0%"]


@pytest.mark.asyncio
async def test_prediction_market_skips_failed_market(clock):
    """Test that an unavailable market is left out of the average."""
    markets = [PredictionMarket("A", "1"), PredictionMarket("B", "2")]
    fetcher = FakePriceFetcher({"1": Ok(0.625), "2": Empty("timeout")})

    result = await PredictionMarketScorer(fetcher, markets, clock=clock).score()

    assert result.score == 63


@pytest.mark.asyncio
async def test_prediction_market_all_failed(clock):
    """Test that no market data scores 0."""
    markets = [PredictionMarket("A", "1")]
    result = await PredictionMarketScorer(FakePriceFetcher({}), markets, clock=clock).score()

    assert result.score == 0
    assert result.signals[0].title == "No Polymarket Data"
