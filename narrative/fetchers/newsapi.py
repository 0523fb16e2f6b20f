"""NewsAPI adapter that extracts funding rounds from robotics headlines."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Callable, Optional

from narrative.errors import MalformedPayload, UpstreamUnavailable
from narrative.fetchers.base import HttpFetcher
from narrative.fetchers.results import FetchResult, FundingRound
from narrative.fetchers.schemas import NewsArticle, NewsResponse
from narrative.types import utc_now

logger = logging.getLogger(__name__)

NEWS_API_BASE = "https://newsapi.org/v2"

FUNDING_QUERY = (
    '(robotics OR "robot company" OR "AI startup" OR humanoid) AND '
    '(raises OR raised OR funding OR "series a" OR "series b" OR "series c" OR investment) AND '
    "(million OR billion)"
)

MIN_ROUND_USD = 1_000_000

_AMOUNT_PATTERNS = (
    re.compile(r"\$\s*(\d+(?:\.\d+)?)\s*(million|billion|m|b)\b"),
    re.compile(r"(\d+(?:\.\d+)?)\s*(million|billion)\s*dollars?"),
    re.compile(r"raises?\s*\$\s*(\d+(?:\.\d+)?)\s*(million|billion|m|b)?"),
    re.compile(r"funding\s*(?:round\s*)?(?:of\s*)?\$\s*(\d+(?:\.\d+)?)\s*(million|billion|m|b)?"),
    re.compile(r"series\s*[a-z]\s*(?:round\s*)?(?:of\s*)?\$?\s*(\d+(?:\.\d+)?)\s*(million|billion|m|b)?"),
)

FUNDING_KEYWORDS = (
    "raises", "raised", "funding", "series a", "series b", "series c", "series d",
    "seed round", "investment", "venture", "capital", "financing", "secures",
    "closes", "announces", "led by", "valuation",
)

ROBOTICS_COMPANIES = (
    "Figure AI", "Figure", "1X Technologies", "1X", "Apptronik", "Agility Robotics", "Agility",
    "Boston Dynamics", "Sanctuary AI", "Sanctuary", "Physical Intelligence", "Skild AI", "Skild",
    "Covariant", "Dexterity", "Locus Robotics", "Berkshire Grey", "Nuro", "Aurora", "Waymo",
    "Cruise", "Anduril", "Shield AI", "Sarcos", "Exotec", "GreyOrange", "Fetch Robotics",
    "Realtime Robotics", "Symbotic", "Plus One Robotics", "RightHand Robotics", "Vecna Robotics",
    "Brain Corp", "Starship", "Serve Robotics", "Ghost Robotics", "Unitree", "UBTECH", "Keenon",
    "Pudu", "Bear Robotics",
)

_TITLE_COMPANY_PATTERNS = (
    re.compile(r"^([A-Z][a-zA-Z0-9\s]+?)\s+(?:raises?|secures?|closes?|announces?)", re.IGNORECASE),
    re.compile(r"([A-Z][a-zA-Z0-9]+(?:\s+(?:AI|Robotics|Technologies))?)\s+(?:raises?|secures?)", re.IGNORECASE),
)
_ARTICLE_WORDS = {"the", "a", "an", "this", "that"}
_ROBOTICS_RE = re.compile(r"robot|autonom|\bai\b|artificial intelligence|machine learning|automation", re.IGNORECASE)
_HAS_AMOUNT_RE = re.compile(r"\$\s*\d+|\d+\s*(million|billion)", re.IGNORECASE)


def parse_funding_amount(text: str) -> Optional[float]:
    """Dollar amount mentioned in `text`, in USD, or None."""
    lowered = text.lower()
    for pattern in _AMOUNT_PATTERNS:
        match = pattern.search(lowered)
        if not match:
            continue
        value = float(match.group(1))
        unit = (match.group(2) or "").lower()
        if unit in ("billion", "b"):
            return value * 1_000_000_000
        # Bare numbers >= 1000 are already in dollars
        return value if value >= 1000 else value * 1_000_000
    return None


def extract_company(article: NewsArticle) -> Optional[str]:
    text = f"{article.title} {article.description or ''}".lower()
    for company in ROBOTICS_COMPANIES:
        if company.lower() in text:
            return company

    for pattern in _TITLE_COMPANY_PATTERNS:
        match = pattern.search(article.title)
        if match:
            name = match.group(1).strip()
            if 2 < len(name) < 50 and name.lower() not in _ARTICLE_WORDS:
                return name
    return None


def is_funding_article(article: NewsArticle) -> bool:
    text = f"{article.title} {article.description or ''}"
    lowered = text.lower()
    if not any(kw in lowered for kw in FUNDING_KEYWORDS):
        return False
    if not _HAS_AMOUNT_RE.search(text):
        return False
    return bool(_ROBOTICS_RE.search(text))


def extract_funding_rounds(articles: list[NewsArticle]) -> list[FundingRound]:
    """One round per company (first mention wins), most recent first."""
    rounds: list[FundingRound] = []
    seen: set[str] = set()
    for article in articles:
        if not is_funding_article(article):
            continue
        company = extract_company(article)
        if not company or company.lower() in seen:
            continue
        amount = parse_funding_amount(f"{article.title} {article.description or ''}")
        if not amount or amount < MIN_ROUND_USD:
            continue
        seen.add(company.lower())
        rounds.append(
            FundingRound(
                company=company,
                amount=amount,
                date=article.published_at,
                source=article.source.name or "NewsAPI",
                url=article.url or None,
                title=article.title,
            )
        )
    rounds.sort(key=lambda r: r.date, reverse=True)
    return rounds


class NewsAPIClient(HttpFetcher):
    source = "NewsAPI"

    def __init__(self, *, api_key: str | None, clock: Callable[[], datetime] = utc_now, **kwargs) -> None:
        headers = {"X-Api-Key": api_key} if api_key else {}
        super().__init__(base_url=NEWS_API_BASE, headers=headers, **kwargs)
        self.api_key = api_key
        self._clock = clock

    async def _rounds(self, days: int) -> list[FundingRound]:
        if not self.api_key:
            raise UpstreamUnavailable(self.source, "NEWSAPI_KEY not configured")

        now = self._clock()
        params = {
            "q": FUNDING_QUERY,
            "from": (now - timedelta(days=days)).date().isoformat(),
            "to": now.date().isoformat(),
            "sortBy": "publishedAt",
            "language": "en",
            "pageSize": 100,
        }
        data = await self._request_json("GET", "/everything", params=params)
        response = NewsResponse.model_validate(data or {})
        if response.status != "ok":
            raise MalformedPayload(self.source, f"status={response.status}")

        rounds = extract_funding_rounds(response.articles)
        logger.info("NewsAPI: %d funding rounds from %d articles", len(rounds), len(response.articles))
        return rounds

    async def fetch_rounds(self, days: int = 30) -> FetchResult[list[FundingRound]]:
        return await self._fetch(f"newsapi:funding:{days}", lambda: self._rounds(days))
