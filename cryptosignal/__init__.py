"""
CryptoSignal Engine

Signal decision engine: turns market snapshots for a fixed set of crypto
assets into BUY / SELL / HOLD trade signals with confidence and risk bounds.
"""

__version__ = "0.1.0"
