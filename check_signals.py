"""
Quick signal check against the live feed.
Run with: python check_signals.py [SYMBOL]
"""

import asyncio
import os
import sys

from dotenv import load_dotenv

root_dir = os.path.dirname(os.path.abspath(__file__))
load_dotenv(os.path.join(root_dir, ".env"))


async def check_signals(symbol: str):
    """Print one signal per strategy."""
    print("\n" + "=" * 60)
    print("CRYPTOSIGNAL - SIGNAL CHECK")
    print("=" * 60)

    from cryptosignal.core.logging import setup_logging
    from cryptosignal.services.strategy import get_signal_service

    setup_logging()
    service = get_signal_service()

    try:
        # Test 1: Health check
        print("\n[1] Market Feed Health...")
        print("-" * 40)
        is_healthy = await service.health_check()
        print(f"Feed Reachable: {is_healthy}")

        # Test 2: Snapshot
        print(f"\n[2] Snapshot for {symbol}...")
        print("-" * 40)
        snapshot = await service.market_data.get_snapshot(symbol)
        print(f"Source: {snapshot.source.value} (indicators: {snapshot.indicator_source.value})")
        print(f"Price: ${snapshot.current_price:,.4f}  24h: {snapshot.change_24h:+.2f}%")
        print(f"RSI: {snapshot.rsi:.1f}  MACD: {snapshot.macd:.4f}")
        print(f"MA50: {snapshot.moving_average_50:,.2f}  MA200: {snapshot.moving_average_200:,.2f}")

        # Test 3: Every strategy
        print("\n[3] Strategy Panel...")
        print("-" * 40)
        for info in service.list_strategies():
            signal = await service.get_trade_signal(info.key, symbol)
            levels = ""
            if signal.stop_loss is not None:
                levels = f"  SL {signal.stop_loss:,.2f} / TP {signal.take_profit:,.2f}"
            print(f"{signal.strategy_name:<20} {signal.decision.value:<5} {signal.confidence:>3}%{levels}")
            print(f"  {signal.reasoning}")
    finally:
        await service.close()

    print("\n" + "=" * 60)
    print("SIGNAL CHECK COMPLETE")
    print("=" * 60 + "\n")


if __name__ == "__main__":
    asyncio.run(check_signals(sys.argv[1] if len(sys.argv) > 1 else "BTC"))
