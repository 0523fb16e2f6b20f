from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from narrative.config import PredictionMarket
from narrative.errors import UpstreamUnavailable
from narrative.fetchers.interfaces import PredictionMarketFetcher
from narrative.fetchers.results import Ok
from narrative.formatting import slugify
from narrative.scorers.base import ComponentScorer
from narrative.types import ComponentResult, Signal, SignalType

logger = logging.getLogger(__name__)


class PredictionMarketScorer(ComponentScorer):
    """The market-implied probability is the score, verbatim.

    score = round(100 * weighted_average(price)) over markets that fetched.
    """

    component = SignalType.PREDICTION_MARKET
    signal_prefix = "polymarket"
    source = "Polymarket CLOB"
    label = "Polymarket"

    def __init__(self, fetcher: PredictionMarketFetcher, markets: Sequence[PredictionMarket], **kwargs) -> None:
        super().__init__(**kwargs)
        self.fetcher = fetcher
        self.markets = tuple(markets)

    async def _compute(self) -> ComponentResult:
        results = await asyncio.gather(*(self.fetcher.fetch_price(m.token_id) for m in self.markets))

        signals: list[Signal] = []
        weighted = 0.0
        total_weight = 0.0
        for market, result in zip(self.markets, results):
            if not isinstance(result, Ok):
                logger.warning("Polymarket %s unavailable: %s", market.name, result.reason)
                continue
            price = result.payload
            weighted += price * market.weight
            total_weight += market.weight
            signals.append(
                self.signal(
                    slugify(market.name),
                    f"{market.name}: {price * 100:.1f}%",
                    "Polymarket probability = score",
                )
            )

        if total_weight == 0:
            raise UpstreamUnavailable(self.source, "could not fetch any prediction market")

        probability = weighted / total_weight
        return self.result(probability * 100, signals, {"P(YES)": probability * 100})
