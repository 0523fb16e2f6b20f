"""Tests for the HTTP upstream adapters using httpx mock transports."""

from __future__ import annotations

import json

import httpx
import pytest

from narrative.cache import InMemoryTTLCache
from narrative.fetchers.github import GitHubClient, classify_commit_trend, is_major_version, truncate_notes
from narrative.fetchers.polymarket import PolymarketClient
from narrative.fetchers.results import Empty, MalformedResponse, Ok
from narrative.fetchers.usaspending import USASpendingClient
from tests.conftest import NOW


def _client(handler, base_url: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)


@pytest.mark.parametrize(
    "version, major",
    [("v2.0.0", True), ("3.0", True), ("v1.0.4", True), ("v1.2.0", False), ("v3.1.0", False), ("jazzy", False)],
)
def test_is_major_version(version, major):
    """Test major-version detection."""
    assert is_major_version(version) is major


def test_classify_commit_trend():
    """Test the 1.2x / 0.8x week-over-week bands."""
    assert classify_commit_trend(130, 100) == "up"
    assert classify_commit_trend(120, 100) == "stable"
    assert classify_commit_trend(79, 100) == "down"


def test_truncate_notes():
    """Test that only the first line is kept and long lines are cut."""
    assert truncate_notes("First line\r\nSecond") == "First line"
    assert truncate_notes("x" * 250) == "x" * 200 + "..."


@pytest.mark.asyncio
async def test_polymarket_price_and_cache():
    """Test the buy-side price request and that the second call hits the cache."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"price": "0.27"})

    client = PolymarketClient(cache=InMemoryTTLCache(), client=_client(handler, "https://clob.polymarket.com"))

    first = await client.fetch_price("123")
    second = await client.fetch_price("123")

    assert first == Ok(0.27)
    assert second == Ok(0.27)
    assert len(requests) == 1
    assert requests[0].url.params["token_id"] == "123"
    assert requests[0].url.params["side"] == "buy"
    await client.close()


@pytest.mark.asyncio
async def test_polymarket_server_error_is_empty():
    """Test that a 5xx becomes Empty, not an exception."""
    client = PolymarketClient(client=_client(lambda r: httpx.Response(503, text="down"), "https://clob.polymarket.com"))

    result = await client.fetch_price("123")

    assert isinstance(result, Empty)
    assert "server error 503" in result.reason


@pytest.mark.asyncio
async def test_polymarket_out_of_range_price_is_malformed():
    """Test that a price outside 0..1 is rejected as malformed."""
    client = PolymarketClient(client=_client(lambda r: httpx.Response(200, json={"price": 7}), "https://clob.polymarket.com"))

    assert isinstance(await client.fetch_price("123"), MalformedResponse)


@pytest.mark.asyncio
async def test_polymarket_invalid_json_is_malformed():
    """Test that a non-JSON body is rejected as malformed."""
    client = PolymarketClient(client=_client(lambda r: httpx.Response(200, text="<html>"), "https://clob.polymarket.com"))

    assert isinstance(await client.fetch_price("123"), MalformedResponse)


@pytest.mark.asyncio
async def test_polymarket_network_error_is_empty():
    """Test that connection failures become Empty."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = PolymarketClient(client=_client(handler, "https://clob.polymarket.com"))

    assert isinstance(await client.fetch_price("123"), Empty)


@pytest.mark.asyncio
async def test_usaspending_awards():
    """Test the award search body and result mapping."""
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/search/spending_by_award/")
        bodies.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "results": [
                    {
                        "Award ID": "W56HZV-25-C-0001",
                        "Recipient Name": "Ghost Robotics",
                        "Award Amount": 12500000.0,
                        "Description": "Quadruped UGV",
                        "Start Date": "2025-06-01",
                        "Awarding Agency": "Department of Defense",
                    },
                    {"Recipient Name": "Small Co", "Award Amount": None},
                ]
            },
        )

    client = USASpendingClient(clock=lambda: NOW, client=_client(handler, "https://api.usaspending.gov/api/v2"))

    result = await client.fetch_awards(30)

    assert isinstance(result, Ok)
    first, second = result.payload
    assert first.award_id == "W56HZV-25-C-0001"
    assert first.award_amount == 12_500_000
    assert first.award_date.isoformat() == "2025-06-01T00:00:00+00:00"
    assert second.award_amount == 0
    assert second.award_date == NOW
    period = bodies[0]["filters"]["time_period"][0]
    assert period == {"start_date": "2025-05-16", "end_date": "2025-06-15"}


@pytest.mark.asyncio
async def test_usaspending_no_results_is_empty():
    """Test that an empty result list is reported as Empty."""
    client = USASpendingClient(
        clock=lambda: NOW,
        client=_client(lambda r: httpx.Response(200, json={"results": []}), "https://api.usaspending.gov/api/v2"),
    )

    assert isinstance(await client.fetch_awards(), Empty)


def _github_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/orgs/ros2/repos":
        return httpx.Response(200, json=[{"name": "rclpy", "stargazers_count": 300}, {"name": "rclcpp", "stargazers_count": 500}])
    if path == "/orgs/Skydio/repos":
        return httpx.Response(404, json={"message": "Not Found"})
    if path == "/users/Skydio/repos":
        return httpx.Response(200, json=[{"name": "skydio-sdk", "stargazers_count": 10}])
    if path == "/repos/ros2/rclcpp/stats/commit_activity":
        return httpx.Response(200, json=[{"week": 1, "total": 10}, {"week": 2, "total": 20}, {"week": 3, "total": 40}])
    if path == "/repos/ros2/rclpy/stats/commit_activity":
        return httpx.Response(202)
    if path == "/repos/Skydio/skydio-sdk/stats/commit_activity":
        return httpx.Response(200, json=[{"week": 1, "total": 5}, {"week": 2, "total": 5}])
    if path == "/repos/ros2/ros2/releases":
        return httpx.Response(
            200,
            json=[
                {"tag_name": "v2.0.0", "name": "Kilted", "published_at": "2025-06-10T00:00:00Z", "body": "Major\nmore", "html_url": "https://github.com/ros2/ros2/releases/v2.0.0"},
                {"tag_name": "v1.9.9", "published_at": "2025-01-01T00:00:00Z", "html_url": "x"},
                {"tag_name": "v2.1.0", "published_at": "2025-06-12T00:00:00Z", "draft": True, "html_url": "y"},
            ],
        )
    return httpx.Response(500, text="unexpected")


@pytest.mark.asyncio
async def test_github_org_activity():
    """Test the leaderboard, the user fallback and pending commit stats."""
    client = GitHubClient(orgs=["ros2", "Skydio"], client=_client(_github_handler, "https://api.github.com"))

    result = await client.fetch_org_activity()

    assert isinstance(result, Ok)
    ros2, skydio = result.payload
    assert ros2.org == "ros2"
    assert ros2.weekly_commits == 40
    assert ros2.monthly_commits == 70
    assert ros2.stars_total == 800
    assert ros2.trend == "up"
    assert skydio.trend == "stable"


@pytest.mark.asyncio
async def test_github_rate_limit_aborts_leaderboard():
    """Test that a 403 stops the leaderboard and reports Empty."""
    client = GitHubClient(
        orgs=["ros2", "Skydio"],
        client=_client(lambda r: httpx.Response(403, json={"message": "rate limit"}), "https://api.github.com"),
    )

    result = await client.fetch_org_activity()

    assert isinstance(result, Empty)
    assert "unauthorized" in result.reason


@pytest.mark.asyncio
async def test_github_releases_window():
    """Test that drafts and releases outside the window are dropped."""
    client = GitHubClient(
        release_repos=[("ros2", "ros2"), ("NVIDIA", "Isaac")],
        clock=lambda: NOW,
        client=_client(_github_handler, "https://api.github.com"),
    )

    result = await client.fetch_releases(30)

    assert isinstance(result, Ok)
    (release,) = result.payload
    assert release.version == "v2.0.0"
    assert release.is_major is True
    assert release.notes == "Major"
