"""
Market Snapshot Provider

CONTRACT:
    Input:  symbol
    Output: MarketSnapshot

RESPONSIBILITIES:
    - Fetch the 24h ticker from the market feed (Binance)
    - Validate price and 24h range
    - Compute indicators from daily closes when available
    - Synthesize a snapshot from reference prices when the feed fails

NEVER RAISES - upstream failures are logged and absorbed.
"""

from cryptosignal.services.market_data.interface import (
    MarketDataServiceInterface,
    MarketFeed,
    TRACKED_SYMBOLS,
)
from cryptosignal.services.market_data.binance_adapter import BinanceMarketFeed
from cryptosignal.services.market_data.fallback import (
    REFERENCE_PRICES,
    generate_fallback_snapshot,
    get_reference_price,
)
from cryptosignal.services.market_data.service import (
    MarketDataService,
    get_market_data_service,
)

__all__ = [
    "MarketDataServiceInterface",
    "MarketFeed",
    "TRACKED_SYMBOLS",
    "BinanceMarketFeed",
    "REFERENCE_PRICES",
    "generate_fallback_snapshot",
    "get_reference_price",
    "MarketDataService",
    "get_market_data_service",
]
