"""
Trend Following Strategy (sentiment-augmented)

Asks the sentiment/AI collaborator for a news-conditioned decision and
adopts it verbatim when it validates. Upstream failures are retried with
linear backoff; exhausted retries, malformed payloads, an elapsed deadline
or a caller cancellation all fall back to the golden/death cross rule.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from pydantic import ValidationError

from cryptosignal.core.config import settings
from cryptosignal.schemas.market import MarketSnapshot
from cryptosignal.schemas.signal import SentimentAnalysis, StrategyDecision
from cryptosignal.services.base import (
    InvalidResponseError,
    UpstreamUnavailableError,
    run_cancellable,
)
from cryptosignal.services.sentiment.interface import SentimentAnalyzer
from cryptosignal.services.strategy.evaluators import (
    build_decision,
    trend_following_technical,
)

logger = logging.getLogger(__name__)


class TrendFollowingStrategy:
    """
    AI-powered trend following.

    One initial call plus one retry per entry in retry_delays
    (default 1s, 2s, 3s).
    """

    def __init__(
        self,
        analyzer: Optional[SentimentAnalyzer] = None,
        retry_delays: Optional[Sequence[float]] = None,
        timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.analyzer = analyzer
        self.retry_delays = list(
            retry_delays if retry_delays is not None else settings.sentiment_retry_delays
        )
        self.timeout = timeout if timeout is not None else settings.sentiment_timeout
        self._sleep = sleep

    @property
    def name(self) -> str:
        return "TrendFollowingStrategy"

    async def evaluate(
        self,
        snapshot: MarketSnapshot,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> StrategyDecision:
        """AI decision when available, technical trend rule otherwise."""
        symbol = snapshot.symbol

        if self.analyzer is None:
            logger.info(f"No sentiment analyzer configured, using technical trend rule for {symbol}")
            return trend_following_technical(snapshot)

        wait_s = timeout if timeout is not None else self.timeout

        try:
            analysis = await asyncio.wait_for(
                self._analyze_with_retry(symbol, cancel_event), timeout=wait_s
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"AI analysis for {symbol} exceeded {wait_s}s, falling back to technical analysis"
            )
            return trend_following_technical(snapshot)
        except (UpstreamUnavailableError, InvalidResponseError) as e:
            logger.warning(f"AI analysis failed, falling back to technical analysis: {e}")
            return trend_following_technical(snapshot)

        logger.info(
            f"Trend Following adopted AI decision for {symbol}: "
            f"{analysis.decision.value} ({analysis.confidence}%)"
        )
        return build_decision(
            snapshot,
            analysis.decision,
            analysis.confidence,
            analysis.reasoning,
            news_impact=analysis.news_impact,
            risk_level=analysis.risk_level,
            timeframe=analysis.timeframe,
            evidence_count=analysis.evidence_count,
        )

    async def _analyze_with_retry(
        self, symbol: str, cancel_event: Optional[asyncio.Event]
    ) -> SentimentAnalysis:
        """Call the analyzer, retrying upstream failures with backoff."""
        attempts = len(self.retry_delays) + 1
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise UpstreamUnavailableError(self.name, f"AI analysis for {symbol} cancelled")

            logger.info(f"AI analysis attempt {attempt}/{attempts} for {symbol}...")
            try:
                payload = await run_cancellable(
                    self.analyzer.analyze(symbol), cancel_event, self.name, f"AI analysis for {symbol}"
                )
            except InvalidResponseError:
                raise
            except Exception as e:
                if cancel_event is not None and cancel_event.is_set():
                    raise UpstreamUnavailableError(
                        self.name, f"AI analysis for {symbol} cancelled"
                    ) from e
                last_error = e
                logger.warning(f"Attempt {attempt} failed: {e}")
            else:
                return self._validate(symbol, payload)

            if attempt < attempts:
                delay = self.retry_delays[attempt - 1]
                logger.info(f"Waiting {delay}s before retry...")
                if await self._wait(delay, cancel_event):
                    raise UpstreamUnavailableError(
                        self.name, f"AI analysis for {symbol} cancelled during backoff"
                    )

        raise UpstreamUnavailableError(
            self.name,
            f"AI analysis failed after {attempts} attempts: {last_error}",
        )

    async def _wait(self, delay: float, cancel_event: Optional[asyncio.Event]) -> bool:
        """Sleep for the backoff delay. Returns True if cancelled meanwhile."""
        if cancel_event is None:
            await self._sleep(delay)
            return False
        if cancel_event.is_set():
            return True
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    def _validate(self, symbol: str, payload) -> SentimentAnalysis:
        """Strictly validate the collaborator payload."""
        if not isinstance(payload, dict):
            raise InvalidResponseError(
                self.name,
                f"Expected dict from sentiment analyzer, got {type(payload).__name__}",
            )
        try:
            return SentimentAnalysis.model_validate(payload)
        except ValidationError as e:
            raise InvalidResponseError(
                self.name,
                f"Malformed AI analysis for {symbol}: {e.error_count()} validation error(s)",
                {"errors": e.errors(include_url=False)},
            ) from e
