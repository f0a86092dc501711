"""
Binance Market Feed Adapter

Fetches REAL market data from the Binance public REST API.
Pairs are quoted in USDT; the suffix is stripped so the engine sees BTC,
ETH, ... only.
"""

import logging
from typing import Optional

import aiohttp

from cryptosignal.core.config import settings
from cryptosignal.schemas.market import TickerData
from cryptosignal.services.base import UpstreamUnavailableError
from cryptosignal.services.market_data.interface import MarketFeed, TRACKED_SYMBOLS

logger = logging.getLogger(__name__)

QUOTE_ASSET = "USDT"
KLINE_CLOSE_INDEX = 4


def to_pair(symbol: str) -> str:
    """BTC -> BTCUSDT."""
    symbol = symbol.upper().strip()
    return symbol if symbol.endswith(QUOTE_ASSET) else f"{symbol}{QUOTE_ASSET}"


def from_pair(pair: str) -> str:
    """BTCUSDT -> BTC."""
    return pair[: -len(QUOTE_ASSET)] if pair.endswith(QUOTE_ASSET) else pair


def parse_ticker_row(row: dict) -> TickerData:
    """Convert a raw /ticker/24hr row into TickerData."""
    return TickerData(
        symbol=from_pair(row["symbol"]),
        last_price=float(row["lastPrice"]),
        price_change_percent=float(row.get("priceChangePercent") or 0.0),
        volume=float(row.get("volume") or 0.0),
        high_price=float(row.get("highPrice") or 0.0),
        low_price=float(row.get("lowPrice") or 0.0),
    )


class BinanceMarketFeed(MarketFeed):
    """
    Binance 24h ticker + klines client.

    Uses a lazily created aiohttp session; call close() on shutdown.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        tracked_symbols: Optional[list[str]] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.binance_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.binance_api_key
        self.tracked_pairs = {to_pair(s) for s in (tracked_symbols or TRACKED_SYMBOLS)}
        self.timeout = timeout if timeout is not None else settings.market_feed_timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            headers = {}
            if self.api_key and self.api_key != "placeholder":
                headers["X-MBX-APIKEY"] = self.api_key
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=headers,
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get_json(self, path: str, params: Optional[dict] = None):
        session = await self._ensure_session()
        url = f"{self.base_url}{path}"

        try:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    raise UpstreamUnavailableError(
                        "BinanceMarketFeed",
                        f"{path} returned status {response.status}",
                    )
                return await response.json()
        except aiohttp.ClientError as e:
            raise UpstreamUnavailableError("BinanceMarketFeed", f"{path} failed: {e}") from e

    async def fetch_24h_ticker(self) -> list[TickerData]:
        """Get 24h ticker rows for tracked symbols."""
        payload = await self._get_json("/ticker/24hr")
        if not isinstance(payload, list):
            raise UpstreamUnavailableError(
                "BinanceMarketFeed", f"Unexpected ticker payload type: {type(payload).__name__}"
            )

        tickers = []
        for row in payload:
            if not isinstance(row, dict) or row.get("symbol") not in self.tracked_pairs:
                continue
            try:
                tickers.append(parse_ticker_row(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed ticker row {row.get('symbol')}: {e}")

        logger.debug(f"Fetched {len(tickers)} tracked tickers from Binance")
        return tickers

    async def fetch_price_history(self, symbol: str, limit: int) -> list[float]:
        """Get daily closing prices (oldest first)."""
        payload = await self._get_json(
            "/klines",
            params={
                "symbol": to_pair(symbol),
                "interval": settings.price_history_interval,
                "limit": limit,
            },
        )
        if not isinstance(payload, list):
            raise UpstreamUnavailableError(
                "BinanceMarketFeed", f"Unexpected klines payload for {symbol}"
            )

        try:
            return [float(kline[KLINE_CLOSE_INDEX]) for kline in payload]
        except (IndexError, TypeError, ValueError) as e:
            raise UpstreamUnavailableError(
                "BinanceMarketFeed", f"Malformed klines for {symbol}: {e}"
            ) from e
