from __future__ import annotations

import math

from narrative.errors import UpstreamUnavailable
from narrative.fetchers.interfaces import DeveloperActivityFetcher
from narrative.fetchers.results import unwrap
from narrative.scorers.base import ComponentScorer
from narrative.signals.scoring import clamp_score
from narrative.types import ComponentResult, SignalType


class DeveloperActivityScorer(ComponentScorer):
    """Commit velocity, trend momentum and breadth across tracked orgs.

    score = 20*ln(1 + commits/50) + 20*(up - down)/orgs + 20*active/orgs
    """

    component = SignalType.DEVELOPER_ACTIVITY
    signal_prefix = "gh"
    source = "GitHub API"
    label = "GitHub"

    def __init__(self, fetcher: DeveloperActivityFetcher, **kwargs) -> None:
        super().__init__(**kwargs)
        self.fetcher = fetcher

    async def _compute(self) -> ComponentResult:
        orgs = unwrap(await self.fetcher.fetch_org_activity(), self.source)
        if not orgs:
            raise UpstreamUnavailable(self.source, "no activity from tracked orgs")

        total_orgs = len(orgs)
        weekly_commits = sum(o.weekly_commits for o in orgs)
        active = sum(1 for o in orgs if o.weekly_commits > 0)
        up = sum(1 for o in orgs if o.trend == "up")
        down = sum(1 for o in orgs if o.trend == "down")

        velocity = 20 * math.log(1 + weekly_commits / 50)
        momentum = 20 * (up - down) / max(1, total_orgs)
        breadth = 20 * (active / total_orgs)

        raw = velocity + momentum + breadth
        summary = self.signal(
            "quant",
            f"GitHub Score: {clamp_score(raw)}",
            f"V={velocity:.1f} + M={momentum:.1f} + B={breadth:.1f} | "
            f"{weekly_commits} commits, {active}/{total_orgs} active",
        )
        return self.result(raw, [summary], {"V": velocity, "M": momentum, "B": breadth})
