"""The seven component scorers."""

from narrative.scorers.base import ComponentScorer
from narrative.scorers.contracts import ContractsScorer
from narrative.scorers.developer_activity import DeveloperActivityScorer
from narrative.scorers.funding import FundingScorer
from narrative.scorers.market_alpha import MarketAlphaScorer
from narrative.scorers.news import NewsPlaceholderScorer
from narrative.scorers.prediction_market import PredictionMarketScorer
from narrative.scorers.release_velocity import ReleaseVelocityScorer

__all__ = [
    "ComponentScorer",
    "ContractsScorer",
    "DeveloperActivityScorer",
    "FundingScorer",
    "MarketAlphaScorer",
    "NewsPlaceholderScorer",
    "PredictionMarketScorer",
    "ReleaseVelocityScorer",
]
