"""
Market Data Service Implementation

Fetches and normalizes market data for one symbol.
Primary: Binance 24h ticker (+ daily klines for indicators)
Fallback: Synthesized snapshot from the reference price table

The provider never raises: a slow or broken upstream must not block the
signal path, so every failure degrades to a synthesized snapshot.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Optional

from cryptosignal.core.config import settings
from cryptosignal.schemas.market import MarketSnapshot, SnapshotSource, TickerData
from cryptosignal.services.base import (
    InvalidMarketDataError,
    UpstreamUnavailableError,
    run_cancellable,
)
from cryptosignal.services.indicators import IndicatorService, get_indicator_service
from cryptosignal.services.market_data.binance_adapter import BinanceMarketFeed
from cryptosignal.services.market_data.fallback import generate_fallback_snapshot
from cryptosignal.services.market_data.interface import (
    MarketDataServiceInterface,
    MarketFeed,
)

logger = logging.getLogger(__name__)

DEFAULT_SYMBOL = "BTC"

# Used when the feed omits the 24h range
MISSING_HIGH_FACTOR = 1.05
MISSING_LOW_FACTOR = 0.95


class MarketDataService(MarketDataServiceInterface):
    """
    Market Snapshot Provider.

    Live data from the market feed, validated; synthesized data otherwise.
    Concurrent requests for the same symbol can share one upstream fetch.
    """

    def __init__(
        self,
        feed: Optional[MarketFeed] = None,
        indicator_service: Optional[IndicatorService] = None,
        fallback_seed: Optional[int] = None,
        single_flight: Optional[bool] = None,
        timeout: Optional[float] = None,
    ):
        self._feed = feed
        self.indicator_service = indicator_service or get_indicator_service()
        self.fallback_seed = (
            fallback_seed if fallback_seed is not None else settings.fallback_seed
        )
        self.single_flight = (
            single_flight if single_flight is not None else settings.market_single_flight
        )
        self.timeout = timeout if timeout is not None else settings.market_feed_timeout
        self._inflight: dict[str, asyncio.Future] = {}

    @property
    def feed(self) -> MarketFeed:
        """Lazy load the Binance feed."""
        if self._feed is None:
            self._feed = BinanceMarketFeed()
        return self._feed

    @property
    def name(self) -> str:
        return "MarketDataService"

    async def execute(self, input_data: str) -> MarketSnapshot:
        """Get a snapshot for a symbol."""
        return await self.get_snapshot(input_data)

    async def get_snapshot(
        self,
        symbol: str,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> MarketSnapshot:
        """Get a live snapshot, or a synthesized one if the feed fails or is cancelled."""
        symbol = (symbol or "").strip().upper() or DEFAULT_SYMBOL
        wait_s = timeout if timeout is not None else self.timeout

        if cancel_event is not None and cancel_event.is_set():
            logger.warning(f"Market fetch for {symbol} cancelled before start, using fallback")
            return self.fallback_snapshot(symbol)

        try:
            snapshot = await asyncio.wait_for(
                run_cancellable(
                    self._fetch_shared(symbol), cancel_event, self.name, f"Market fetch for {symbol}"
                ),
                timeout=wait_s,
            )
            logger.info(
                f"Live snapshot for {symbol}: ${snapshot.current_price:,.4f} "
                f"({snapshot.change_24h:+.2f}%, indicators={snapshot.indicator_source.value})"
            )
            return snapshot
        except asyncio.TimeoutError:
            logger.warning(f"Market feed timed out after {wait_s}s for {symbol}, using fallback")
        except Exception as e:
            logger.warning(f"Failed to get live data for {symbol}, using fallback: {e}")

        return self.fallback_snapshot(symbol)

    def fallback_snapshot(self, symbol: str) -> MarketSnapshot:
        """Synthesized snapshot from the reference price table."""
        return generate_fallback_snapshot(
            symbol,
            self.indicator_service,
            seed=self.fallback_seed,
        )

    async def health_check(self) -> bool:
        """Check market feed connectivity."""
        try:
            tickers = await asyncio.wait_for(self.feed.fetch_24h_ticker(), timeout=self.timeout)
            return len(tickers) > 0
        except Exception as e:
            logger.error(f"Market feed health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the underlying feed."""
        if self._feed is not None:
            await self._feed.close()

    # =========================================================================
    # Internals
    # =========================================================================

    def _fetch_shared(self, symbol: str):
        """Awaitable for a live fetch, shared between concurrent callers."""
        if not self.single_flight:
            return self._fetch_live(symbol)

        task = self._inflight.get(symbol)
        if task is None:
            task = asyncio.ensure_future(self._fetch_live(symbol))
            self._inflight[symbol] = task
            task.add_done_callback(lambda t, s=symbol: self._release(s, t))

        # A caller's timeout must not cancel the fetch other callers wait on
        return asyncio.shield(task)

    def _release(self, symbol: str, task: asyncio.Future) -> None:
        if self._inflight.get(symbol) is task:
            del self._inflight[symbol]
        if not task.cancelled():
            # Mark retrieved; waiters that timed out never read it
            task.exception()

    async def _fetch_live(self, symbol: str) -> MarketSnapshot:
        tickers = await self.feed.fetch_24h_ticker()
        ticker = next((t for t in tickers if t.symbol.upper() == symbol), None)
        if ticker is None:
            raise UpstreamUnavailableError(self.name, f"{symbol} is not tracked by the market feed")

        self._validate_ticker(ticker)

        price = ticker.last_price
        change = ticker.price_change_percent if math.isfinite(ticker.price_change_percent) else 0.0
        closes = await self._fetch_history(symbol)
        indicators = self.indicator_service.from_history(closes, price, change)

        return MarketSnapshot(
            symbol=symbol,
            current_price=price,
            volume=ticker.volume if ticker.volume > 0 else 0.0,
            high_24h=ticker.high_price or price * MISSING_HIGH_FACTOR,
            low_24h=ticker.low_price or price * MISSING_LOW_FACTOR,
            change_24h=round(change, 2),
            rsi=indicators.rsi,
            macd=indicators.macd,
            moving_average_50=indicators.moving_average_50,
            moving_average_200=indicators.moving_average_200,
            observed_at=datetime.now(timezone.utc),
            source=SnapshotSource.LIVE,
            indicator_source=indicators.source,
        )

    async def _fetch_history(self, symbol: str) -> Optional[list[float]]:
        """Closing prices for indicators; None if unavailable."""
        try:
            return await asyncio.wait_for(
                self.feed.fetch_price_history(symbol, settings.price_history_limit),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning(f"Price history unavailable for {symbol}, using synthetic indicators: {e}")
            return None

    def _validate_ticker(self, ticker: TickerData) -> None:
        """Reject quotes the engine cannot reason about."""
        price = ticker.last_price
        if not isinstance(price, (int, float)) or not math.isfinite(price) or price <= 0:
            raise InvalidMarketDataError(
                self.name, f"Invalid price for {ticker.symbol}: {price!r}"
            )

        high, low = ticker.high_price, ticker.low_price
        if not (math.isfinite(high) and math.isfinite(low)) or low < 0 or high < 0:
            raise InvalidMarketDataError(
                self.name, f"Invalid 24h range for {ticker.symbol}: {low!r}-{high!r}"
            )
        if high and low and high < low:
            raise InvalidMarketDataError(
                self.name, f"Inverted 24h range for {ticker.symbol}: {low}-{high}"
            )


# Singleton instance
_service_instance: Optional[MarketDataService] = None


def get_market_data_service() -> MarketDataService:
    """Get or create market data service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = MarketDataService()
    return _service_instance
