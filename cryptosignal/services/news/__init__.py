"""
News Integration Service

Fetches and scores cryptocurrency news for the AI trade analysis.
"""

from cryptosignal.services.news.service import (
    COIN_NAMES,
    NewsArticle,
    NewsSentiment,
    NewsService,
    get_coin_name,
    get_news_service,
    parse_newsdata,
    parse_rss,
    score_headline,
)

__all__ = [
    "COIN_NAMES",
    "NewsArticle",
    "NewsSentiment",
    "NewsService",
    "get_coin_name",
    "get_news_service",
    "parse_newsdata",
    "parse_rss",
    "score_headline",
]
