"""USASpending.gov adapter for robotics contract awards."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from narrative.fetchers.base import HttpFetcher
from narrative.fetchers.results import ContractAward, FetchResult
from narrative.fetchers.schemas import SpendingByAwardResponse
from narrative.types import utc_now

logger = logging.getLogger(__name__)

USASPENDING_BASE = "https://api.usaspending.gov/api/v2"

ROBOTICS_QUERY = "robotics OR autonomous OR unmanned systems OR robot"
CONTRACT_AWARD_TYPES = ["A", "B", "C", "D"]  # contracts only, no grants

AWARD_FIELDS = [
    "Award ID",
    "Recipient Name",
    "Award Amount",
    "Description",
    "Start Date",
    "Awarding Agency",
]


class USASpendingClient(HttpFetcher):
    source = "USASpending.gov"

    def __init__(
        self,
        *,
        min_amount: float = 100_000,
        limit: int = 50,
        clock: Callable[[], datetime] = utc_now,
        **kwargs,
    ) -> None:
        super().__init__(base_url=USASPENDING_BASE, **kwargs)
        self.min_amount = min_amount
        self.limit = limit
        self._clock = clock

    def build_search(self, days: int) -> dict:
        now = self._clock()
        start = now - timedelta(days=days)
        return {
            "filters": {
                "award_type_codes": CONTRACT_AWARD_TYPES,
                "keywords": [ROBOTICS_QUERY],
                "award_amounts": [{"lower_bound": self.min_amount}],
                "time_period": [
                    {"start_date": start.date().isoformat(), "end_date": now.date().isoformat()}
                ],
            },
            "fields": AWARD_FIELDS,
            "page": 1,
            "limit": self.limit,
            "sort": "Award Amount",
            "order": "desc",
        }

    async def _awards(self, days: int) -> list[ContractAward]:
        data = await self._request_json("POST", "/search/spending_by_award/", json=self.build_search(days))
        response = SpendingByAwardResponse.model_validate(data or {})
        now = self._clock()
        awards = [
            ContractAward(
                award_id=item.award_id,
                recipient_name=item.recipient_name,
                award_amount=item.award_amount,
                description=item.description or "",
                award_date=item.start_date or now,
                agency=item.agency or "",
            )
            for item in response.results
        ]
        logger.info("USASpending: %d robotics awards in last %d days", len(awards), days)
        return awards

    async def fetch_awards(self, days: int = 30) -> FetchResult[list[ContractAward]]:
        return await self._fetch(f"usaspending:awards:{days}", lambda: self._awards(days))
