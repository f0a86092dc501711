"""
LLM Sentiment Service

News → LLM → decision payload for the Trend Following strategy.
Only parses; validation happens in the strategy.
"""

import json
import logging
import re
from typing import Optional

from cryptosignal.services.base import InvalidResponseError, UpstreamUnavailableError
from cryptosignal.services.llm.client import LLMClient, get_llm_client
from cryptosignal.services.llm.prompts import (
    TRADE_ANALYSIS_SYSTEM_PROMPT,
    format_trade_analysis_prompt,
)
from cryptosignal.services.news.service import NewsService, get_coin_name, get_news_service
from cryptosignal.services.sentiment.interface import SentimentAnalyzer

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json(content: str) -> dict:
    """
    Pull the JSON object out of an LLM reply.

    Handles markdown code fences and prose around the object.

    Raises:
        ValueError: no JSON object could be parsed
    """
    text = (content or "").strip()

    fenced = _FENCED_JSON.search(text)
    if fenced:
        text = fenced.group(1)

    match = _JSON_OBJECT.search(text)
    if match:
        text = match.group(0)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"LLM returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"LLM returned {type(data).__name__}, expected an object")
    return data


class LLMSentimentService(SentimentAnalyzer):
    """
    Sentiment collaborator backed by the LLM client.

    Upstream errors raise UpstreamUnavailableError (retryable);
    unparseable replies raise InvalidResponseError.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        news_service: Optional[NewsService] = None,
    ):
        self._llm_client = llm_client
        self._news_service = news_service

    @property
    def llm_client(self) -> LLMClient:
        """Lazy load LLM client."""
        if self._llm_client is None:
            self._llm_client = get_llm_client()
        return self._llm_client

    @property
    def news_service(self) -> NewsService:
        """Lazy load news service."""
        if self._news_service is None:
            self._news_service = get_news_service()
        return self._news_service

    async def analyze(self, symbol: str) -> dict:
        """Fetch news, ask the LLM, return the parsed decision payload."""
        logger.info(f"Fetching news for {symbol}...")
        articles = await self.news_service.get_symbol_news(symbol)

        user_prompt = format_trade_analysis_prompt(
            symbol=symbol,
            articles=articles,
            coin_name=get_coin_name(symbol),
        )

        try:
            response = await self.llm_client.generate(
                system_prompt=TRADE_ANALYSIS_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                temperature=0.3,
                response_format="json",
            )
        except Exception as e:
            raise UpstreamUnavailableError(self.name, f"LLM call failed: {e}") from e

        try:
            analysis = extract_json(response.content)
        except ValueError as e:
            logger.error(f"Failed to parse LLM response: {e}")
            logger.error(f"Response content: {(response.content or '')[:500]}")
            raise InvalidResponseError(self.name, str(e)) from e

        analysis["evidence_count"] = len(articles)
        analysis.pop("evidenceCount", None)
        analysis.pop("newsCount", None)
        return analysis

    async def close(self) -> None:
        if self._news_service is not None:
            await self._news_service.close()


def get_sentiment_service() -> Optional[LLMSentimentService]:
    """
    Sentiment collaborator for the default engine.

    None when no LLM provider is configured.
    """
    client = get_llm_client()
    if not client.is_configured:
        return None
    return LLMSentimentService(llm_client=client)
