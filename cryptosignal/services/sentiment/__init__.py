"""
Sentiment / AI Collaborator

CONTRACT:
    Input:  symbol
    Output: raw decision payload (dict), validated by the caller

RESPONSIBILITIES:
    - Gather recent news for the coin
    - Ask the LLM for a news-conditioned BUY/SELL/HOLD
    - Extract the JSON answer from the reply

FALLBACK BEHAVIOR:
    - No LLM keys: get_sentiment_service() returns None
    - Failures surface as ServiceErrors; Trend Following falls back to
      its technical rule
"""

from cryptosignal.services.sentiment.interface import SentimentAnalyzer
from cryptosignal.services.sentiment.service import (
    LLMSentimentService,
    extract_json,
    get_sentiment_service,
)

__all__ = [
    "SentimentAnalyzer",
    "LLMSentimentService",
    "extract_json",
    "get_sentiment_service",
]
