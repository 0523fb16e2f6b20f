"""Polymarket CLOB price adapter."""

from __future__ import annotations

from narrative.fetchers.base import HttpFetcher
from narrative.fetchers.results import FetchResult
from narrative.fetchers.schemas import ClobPrice

CLOB_API_BASE = "https://clob.polymarket.com"


class PolymarketClient(HttpFetcher):
    source = "Polymarket CLOB"

    def __init__(self, **kwargs) -> None:
        kwargs.setdefault("cache_ttl", 60)
        super().__init__(base_url=CLOB_API_BASE, **kwargs)

    async def _price(self, token_id: str) -> float:
        data = await self._request_json("GET", "/price", params={"token_id": token_id, "side": "buy"})
        return ClobPrice.model_validate(data or {}).price

    async def fetch_price(self, token_id: str) -> FetchResult[float]:
        """Buy-side price (market-implied probability, 0..1) for one outcome token."""
        return await self._fetch(f"polymarket:price:{token_id}", lambda: self._price(token_id))
