from __future__ import annotations

import math

from narrative.errors import UpstreamUnavailable
from narrative.fetchers.interfaces import ReleaseFetcher
from narrative.fetchers.results import unwrap
from narrative.scorers.base import ComponentScorer
from narrative.signals.scoring import clamp_score
from narrative.types import ComponentResult, SignalType

TOTAL_TRACKED_ORGS = 11


class ReleaseVelocityScorer(ComponentScorer):
    """Release cadence of tracked robotics SDKs.

    score = 30*ln(1 + releases/5) + min(30, 10*major) + 20*unique_orgs/tracked_orgs
    """

    component = SignalType.RELEASE_VELOCITY
    signal_prefix = "tech"
    source = "GitHub Releases"
    label = "Release"

    def __init__(
        self,
        fetcher: ReleaseFetcher,
        *,
        tracked_orgs: int = TOTAL_TRACKED_ORGS,
        lookback_days: int = 30,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.fetcher = fetcher
        self.tracked_orgs = tracked_orgs
        self.lookback_days = lookback_days

    async def _compute(self) -> ComponentResult:
        releases = unwrap(await self.fetcher.fetch_releases(self.lookback_days), self.source)
        if not releases:
            raise UpstreamUnavailable(self.source, f"no releases from tracked SDKs in {self.lookback_days} days")

        major = [r for r in releases if r.is_major]
        unique_orgs = len({r.org for r in releases})

        velocity = 30 * math.log(1 + len(releases) / 5)
        major_bonus = min(30, 10 * len(major))
        breadth = 20 * (unique_orgs / self.tracked_orgs)
        raw = velocity + major_bonus + breadth

        signals = [
            self.signal(
                "",
                f"Major: {r.org}/{r.repo} {r.version}",
                (r.notes or "New major version")[:50],
                timestamp=r.date,
                url=r.url,
                signal_id=f"release-{r.org}-{r.version}",
            )
            for r in major[:3]
        ]
        breakdown = {"Velocity": velocity, "Major": major_bonus, "Breadth": breadth}
        signals.append(
            self.signal(
                "quant",
                f"Technical Score: {clamp_score(raw)}",
                f"Velocity={velocity:.1f} + Major={major_bonus:.1f} + Breadth={breadth:.1f} | "
                f"{len(releases)} releases, {len(major)} major, {unique_orgs} orgs",
            )
        )
        return self.result(raw, signals, breakdown)
