"""
News Service

Recent headlines for a coin, each tagged with a keyword sentiment.
The LLM trade analysis reads them as context; an empty list is a valid
answer and never an error.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import aiohttp

from cryptosignal.core.config import settings

logger = logging.getLogger(__name__)

MAX_ARTICLES = 5
GOOGLE_NEWS_RSS_URL = "https://news.google.com/rss/search"
SENTIMENT_THRESHOLD = 0.2


class NewsSentiment(str, Enum):
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"


@dataclass
class NewsArticle:
    title: str
    source: str
    url: str
    published_at: str
    summary: Optional[str] = None
    sentiment: NewsSentiment = NewsSentiment.NEUTRAL
    sentiment_score: float = 0.0  # -1 (bearish) .. 1 (bullish)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["sentiment"] = self.sentiment.value
        return data


BULLISH_KEYWORDS = (
    "surge", "soar", "rally", "gain", "rise", "jump", "breakout",
    "bullish", "adoption", "approval", "approved", "record", "all-time",
    "inflow", "inflows", "upgrade", "partnership", "optimistic", "strong",
)

BEARISH_KEYWORDS = (
    "fall", "drop", "decline", "crash", "plunge", "sink", "selloff",
    "bearish", "hack", "hacked", "exploit", "lawsuit", "ban", "outflow",
    "outflows", "liquidation", "liquidations", "fear", "weak", "warning",
)

# Search terms work better with the coin's name than its ticker
COIN_NAMES = {
    "BTC": "Bitcoin",
    "ETH": "Ethereum",
    "SOL": "Solana",
    "ADA": "Cardano",
    "DOGE": "Dogecoin",
    "XRP": "Ripple",
    "MATIC": "Polygon",
    "DOT": "Polkadot",
}


def get_coin_name(symbol: str) -> str:
    key = symbol.upper()
    return COIN_NAMES.get(key, key)


def score_headline(text: str) -> tuple[NewsSentiment, float]:
    """
    Keyword sentiment of a headline as (label, score).

    Score is (bullish hits - bearish hits) / total hits, so a headline
    with no keywords is neutral at 0.0.
    """
    lowered = text.lower()
    ups = sum(keyword in lowered for keyword in BULLISH_KEYWORDS)
    downs = sum(keyword in lowered for keyword in BEARISH_KEYWORDS)

    if ups + downs == 0:
        return NewsSentiment.NEUTRAL, 0.0

    score = round((ups - downs) / (ups + downs), 2)
    if score >= SENTIMENT_THRESHOLD:
        return NewsSentiment.BULLISH, score
    if score <= -SENTIMENT_THRESHOLD:
        return NewsSentiment.BEARISH, score
    return NewsSentiment.NEUTRAL, score


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _make_article(title: str, source: str, url: str, published_at: str,
                  summary: Optional[str] = None) -> NewsArticle:
    sentiment, score = score_headline(title)
    return NewsArticle(
        title=title,
        source=source,
        url=url,
        published_at=published_at,
        summary=summary,
        sentiment=sentiment,
        sentiment_score=score,
    )


def _rss_timestamp(raw: Optional[str]) -> str:
    """RFC 822 pubDate to ISO 8601 UTC; now when missing or malformed."""
    if not raw:
        return _now_iso()
    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return _now_iso()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()


def parse_rss(content: str, num_results: int = MAX_ARTICLES) -> List[NewsArticle]:
    """Articles from a Google News RSS document. Items without a title are dropped."""
    articles = []
    for item in ET.fromstring(content).iter("item"):
        if len(articles) >= num_results:
            break
        title = item.findtext("title")
        if not title:
            continue
        articles.append(_make_article(
            title=title,
            source=item.findtext("source") or "Google News",
            url=item.findtext("link") or "",
            published_at=_rss_timestamp(item.findtext("pubDate")),
        ))
    return articles


def parse_newsdata(payload: Dict[str, Any], num_results: int = MAX_ARTICLES) -> List[NewsArticle]:
    """Articles from a newsdata.io /news response body."""
    articles = []
    for item in payload.get("results") or []:
        if len(articles) >= num_results:
            break
        if not item.get("title"):
            continue
        articles.append(_make_article(
            title=item["title"],
            source=item.get("source_id") or "newsdata.io",
            url=item.get("link") or "",
            published_at=item.get("pubDate") or _now_iso(),
            summary=item.get("description"),
        ))
    return articles


class NewsService:
    """
    Headline source for the sentiment analyzer.

    Uses newsdata.io when NEWS_API_KEY is set and Google News RSS
    otherwise. One aiohttp session is opened lazily and reused.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.api_key = api_key if api_key is not None else settings.news_api_key
        self.base_url = base_url or settings.news_api_base_url
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": "Mozilla/5.0 (compatible; cryptosignal)"},
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_symbol_news(self, symbol: str, num_results: int = MAX_ARTICLES) -> List[NewsArticle]:
        """Latest headlines for a coin; empty list when the source fails."""
        query = f"{get_coin_name(symbol)} cryptocurrency"
        source = "newsdata.io" if self.api_key else "Google News"

        try:
            if self.api_key:
                articles = await self._from_newsdata(query, num_results)
            else:
                articles = await self._from_google_news(query, num_results)
        except Exception as e:
            logger.error(f"{source} fetch failed for {symbol}: {e}")
            return []

        logger.info(f"{len(articles)} headlines for {symbol} from {source}")
        return articles

    async def _from_newsdata(self, query: str, num_results: int) -> List[NewsArticle]:
        session = await self._ensure_session()
        params = {
            "apikey": self.api_key,
            "q": query,
            "language": "en",
            "category": "business,technology",
        }
        async with session.get(self.base_url, params=params) as response:
            if response.status != 200:
                logger.warning(f"newsdata.io returned HTTP {response.status}")
                return []
            payload = await response.json()
        return parse_newsdata(payload, num_results)

    async def _from_google_news(self, query: str, num_results: int) -> List[NewsArticle]:
        session = await self._ensure_session()
        params = {"q": query, "hl": "en-US", "gl": "US", "ceid": "US:en"}
        async with session.get(GOOGLE_NEWS_RSS_URL, params=params) as response:
            if response.status != 200:
                logger.warning(f"Google News returned HTTP {response.status}")
                return []
            content = await response.text()
        return parse_rss(content, num_results)


_news_service: Optional[NewsService] = None


def get_news_service() -> NewsService:
    global _news_service
    if _news_service is None:
        _news_service = NewsService()
    return _news_service
