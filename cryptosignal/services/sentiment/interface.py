"""
Sentiment Analyzer Interface

Contract for the external news-sentiment / AI collaborator consulted by
the Trend Following strategy.
"""

from abc import ABC, abstractmethod


class SentimentAnalyzer(ABC):
    """
    Sentiment/AI collaborator.

    analyze() returns a raw dict with keys:
        decision, confidence, reasoning, news_impact, risk_level,
        timeframe, evidence_count
    (camelCase aliases newsImpact / riskLevel / evidenceCount accepted).

    Implementations may fail, time out or return malformed content;
    callers validate the payload before adopting it.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def analyze(self, symbol: str) -> dict:
        """Analyze recent news for a symbol and propose a decision."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
