"""GitHub adapter: org commit activity and SDK releases."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Callable, Literal, Sequence

from narrative.errors import UpstreamUnavailable
from narrative.fetchers.base import HttpFetcher
from narrative.fetchers.results import FetchResult, OrgActivity, Release
from narrative.fetchers.schemas import CommitWeek, GitHubRelease, GitHubRepo
from narrative.types import utc_now

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"

TRACKED_ROBOTICS_ORGS: tuple[str, ...] = (
    "boston-dynamics",
    "agilityrobotics",
    "anduril",
    "Skydio",
    "NVIDIA",
    "ros2",
    "unitreerobotics",
    "google-deepmind",
    "facebookresearch",
    "openai",
    "teslamotors",
)

PRIORITY_RELEASE_REPOS: tuple[tuple[str, str], ...] = (
    ("boston-dynamics", "spot-sdk"),
    ("ros2", "ros2"),
    ("NVIDIA", "Isaac"),
    ("NVIDIA", "isaac_ros_common"),
    ("google-deepmind", "mujoco"),
    ("openai", "gym"),
    ("facebookresearch", "habitat-lab"),
    ("unitreerobotics", "unitree_legged_sdk"),
)

_MAJOR_EXACT = re.compile(r"^v?\d+\.0(\.0)?$")
_MAJOR_EARLY = re.compile(r"^v?[12]\.0")


def is_major_version(version: str) -> bool:
    """`v3.0`, `4.0.0`, or anything in the 1.0/2.0 lines."""
    return bool(_MAJOR_EXACT.match(version) or _MAJOR_EARLY.match(version))


def classify_commit_trend(this_week: int, last_week: int) -> Literal["up", "down", "stable"]:
    if this_week > last_week * 1.2:
        return "up"
    if this_week < last_week * 0.8:
        return "down"
    return "stable"


def truncate_notes(notes: str, limit: int = 200) -> str:
    first_line = notes.replace("\r\n", "\n").split("\n")[0] if notes else ""
    return first_line[:limit] + "..." if len(first_line) > limit else first_line


class GitHubClient(HttpFetcher):
    source = "GitHub API"

    def __init__(
        self,
        *,
        token: str | None = None,
        orgs: Sequence[str] = TRACKED_ROBOTICS_ORGS,
        release_repos: Sequence[tuple[str, str]] = PRIORITY_RELEASE_REPOS,
        repos_per_org: int = 10,
        activity_repos_per_org: int = 3,
        clock: Callable[[], datetime] = utc_now,
        **kwargs,
    ) -> None:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(base_url=GITHUB_API_BASE, headers=headers, **kwargs)
        self.orgs = tuple(orgs)
        self.release_repos = tuple(release_repos)
        self.repos_per_org = repos_per_org
        self.activity_repos_per_org = activity_repos_per_org
        self._clock = clock

    async def _org_repos(self, org: str) -> list[GitHubRepo]:
        params = {"per_page": self.repos_per_org, "sort": "pushed"}
        try:
            data = await self._request_json("GET", f"/orgs/{org}/repos", params=params)
        except UpstreamUnavailable as exc:
            if exc.status_code != 404:
                raise
            # Some tracked accounts are users, not orgs
            data = await self._request_json("GET", f"/users/{org}/repos", params=params)
        repos = [GitHubRepo.model_validate(r) for r in data or []]
        return sorted(repos, key=lambda r: r.stargazers_count, reverse=True)

    async def _commit_weeks(self, org: str, repo: str) -> list[CommitWeek]:
        data = await self._request_json("GET", f"/repos/{org}/{repo}/stats/commit_activity")
        # 202 with an empty/dict body while GitHub computes the stats
        if not isinstance(data, list):
            return []
        return [CommitWeek.model_validate(w) for w in data]

    async def _org_activity(self, org: str) -> OrgActivity | None:
        repos = await self._org_repos(org)
        if not repos:
            return None

        weekly = monthly = previous_week = 0
        for repo in repos[: self.activity_repos_per_org]:
            weeks = await self._commit_weeks(org, repo.name)
            if not weeks:
                continue
            weekly += weeks[-1].total
            previous_week += weeks[-2].total if len(weeks) > 1 else 0
            monthly += sum(w.total for w in weeks[-4:])

        return OrgActivity(
            org=org,
            weekly_commits=weekly,
            monthly_commits=monthly,
            stars_total=sum(r.stargazers_count for r in repos),
            trend=classify_commit_trend(weekly, previous_week),
        )

    async def _leaderboard(self) -> list[OrgActivity]:
        entries: list[OrgActivity] = []
        for org in self.orgs:
            try:
                entry = await self._org_activity(org)
            except UpstreamUnavailable as exc:
                if exc.status_code in {403, 429}:
                    # Rate limited: the remaining orgs would fail the same way
                    raise
                logger.warning("Skipping GitHub org %s: %s", org, exc.reason)
                continue
            if entry is not None:
                entries.append(entry)
        entries.sort(key=lambda e: e.weekly_commits, reverse=True)
        logger.info("GitHub leaderboard: %d/%d orgs", len(entries), len(self.orgs))
        return entries

    async def fetch_org_activity(self) -> FetchResult[list[OrgActivity]]:
        return await self._fetch("github:leaderboard", self._leaderboard)

    async def _releases(self, days: int) -> list[Release]:
        cutoff = self._clock() - timedelta(days=days)
        releases: list[Release] = []
        for org, repo in self.release_repos:
            try:
                data = await self._request_json("GET", f"/repos/{org}/{repo}/releases", params={"per_page": 5})
            except UpstreamUnavailable as exc:
                logger.warning("Skipping releases for %s/%s: %s", org, repo, exc.reason)
                continue
            for raw in data or []:
                release = GitHubRelease.model_validate(raw)
                if release.draft or release.published_at is None or release.published_at < cutoff:
                    continue
                version = release.tag_name or release.name or ""
                releases.append(
                    Release(
                        org=org,
                        repo=repo,
                        version=version,
                        name=release.name or version,
                        date=release.published_at,
                        notes=truncate_notes(release.body or ""),
                        url=release.html_url,
                        is_major=is_major_version(version),
                    )
                )
        releases.sort(key=lambda r: r.date, reverse=True)
        return releases

    async def fetch_releases(self, days: int = 30) -> FetchResult[list[Release]]:
        return await self._fetch(f"github:releases:{days}", lambda: self._releases(days))
