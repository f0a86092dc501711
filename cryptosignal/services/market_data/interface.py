"""
Market Data Service Interface

Defines the contract for the market feed collaborator and the snapshot
provider built on top of it.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from cryptosignal.services.base import BaseService
from cryptosignal.schemas.market import MarketSnapshot, TickerData

# Symbols tracked by the upstream 24h ticker feed
TRACKED_SYMBOLS = ["BTC", "ETH", "SOL", "ADA", "DOGE", "XRP"]


class MarketFeed(ABC):
    """
    Market feed collaborator.

    Implementations may fail or time out; the snapshot provider absorbs
    every failure.
    """

    @abstractmethod
    async def fetch_24h_ticker(self) -> list[TickerData]:
        """24h ticker rows for the tracked symbol set."""
        pass

    @abstractmethod
    async def fetch_price_history(self, symbol: str, limit: int) -> list[float]:
        """Closing prices, oldest first, for indicator calculation."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None


class MarketDataServiceInterface(BaseService[str, MarketSnapshot]):
    """
    Market Snapshot Provider Contract.

    INPUT: symbol (any case)

    OUTPUT: MarketSnapshot
        - Live values from the feed when available
        - Synthesized values from the reference price table otherwise

    NEVER RAISES: every upstream failure is logged and replaced by a
    synthesized snapshot.
    """

    @property
    def name(self) -> str:
        return "MarketDataService"

    @abstractmethod
    async def execute(self, input_data: str) -> MarketSnapshot:
        """Get a snapshot for a symbol."""
        pass

    @abstractmethod
    async def get_snapshot(
        self,
        symbol: str,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> MarketSnapshot:
        """
        Get a snapshot for a symbol.

        Args:
            symbol: Ticker, case-insensitive (e.g. "btc")
            timeout: Upstream fetch timeout in seconds (settings default if None)
            cancel_event: Abandons the fetch and synthesizes when set

        Returns:
            A valid MarketSnapshot, always
        """
        pass
