"""Shared fixtures and fakes. No test touches the network."""

import asyncio
from typing import Optional

import pytest

from cryptosignal.schemas.market import (
    IndicatorSource,
    MarketSnapshot,
    SnapshotSource,
    TickerData,
)
from cryptosignal.services.base import UpstreamUnavailableError
from cryptosignal.services.indicators import IndicatorService
from cryptosignal.services.market_data import MarketDataService, MarketFeed
from cryptosignal.services.sentiment import SentimentAnalyzer


class FakeMarketFeed(MarketFeed):
    """In-memory feed with call counters."""

    def __init__(
        self,
        tickers: Optional[list[TickerData]] = None,
        history: Optional[dict[str, list[float]]] = None,
        delay: float = 0.0,
    ):
        self.tickers = tickers or []
        self.history = history or {}
        self.delay = delay
        self.ticker_calls = 0
        self.history_calls = 0
        self.closed = False

    async def fetch_24h_ticker(self) -> list[TickerData]:
        self.ticker_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return list(self.tickers)

    async def fetch_price_history(self, symbol: str, limit: int) -> list[float]:
        self.history_calls += 1
        if symbol not in self.history:
            raise UpstreamUnavailableError("FakeMarketFeed", f"no history for {symbol}")
        return self.history[symbol][-limit:]

    async def close(self) -> None:
        self.closed = True


class FailingFeed(MarketFeed):
    """Feed whose every call fails."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error or UpstreamUnavailableError("FailingFeed", "connection refused")
        self.calls = 0

    async def fetch_24h_ticker(self) -> list[TickerData]:
        self.calls += 1
        raise self.error

    async def fetch_price_history(self, symbol: str, limit: int) -> list[float]:
        self.calls += 1
        raise self.error


class FakeSentimentAnalyzer(SentimentAnalyzer):
    """
    Scripted analyzer.

    Each call pops the next outcome; an Exception instance is raised, anything
    else is returned. The last outcome repeats once the script runs out.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def analyze(self, symbol: str) -> dict:
        self.calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_snapshot(**overrides) -> MarketSnapshot:
    """Neutral BTC snapshot; override any field."""
    values = dict(
        symbol="BTC",
        current_price=90000.0,
        volume=800_000.0,
        high_24h=95000.0,
        low_24h=85000.0,
        change_24h=0.5,
        rsi=50.0,
        macd=0.0,
        moving_average_50=90000.0,
        moving_average_200=90000.0,
        source=SnapshotSource.LIVE,
        indicator_source=IndicatorSource.SYNTHETIC,
    )
    values.update(overrides)
    return MarketSnapshot(**values)


def make_ticker(symbol: str = "BTC", **overrides) -> TickerData:
    values = dict(
        symbol=symbol,
        last_price=95000.0,
        price_change_percent=2.5,
        volume=1_200_000.0,
        high_price=96000.0,
        low_price=92000.0,
    )
    values.update(overrides)
    return TickerData(**values)


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def indicator_service():
    return IndicatorService()


@pytest.fixture
def failing_market_data(indicator_service):
    return MarketDataService(
        feed=FailingFeed(),
        indicator_service=indicator_service,
        fallback_seed=0,
        timeout=1.0,
    )
