"""
Engine Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings from environment variables."""

    # Application
    app_name: str = "CryptoSignal Engine"
    app_version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Market feed (Binance public API)
    binance_base_url: str = "https://api.binance.com/api/v3"
    binance_api_key: Optional[str] = None
    market_feed_timeout: float = 10.0  # Interactive paths
    price_history_limit: int = 250  # Enough candles for MA200
    price_history_interval: str = "1d"
    market_single_flight: bool = True
    fallback_seed: int = 0  # Seed for synthesized fallback snapshots

    # Sentiment / AI collaborator
    sentiment_timeout: float = 30.0
    sentiment_retry_delays: list[float] = [1.0, 2.0, 3.0]

    # LLM Providers
    llm_primary_provider: str = "gemini"  # Options: gemini, anthropic, openai
    gemini_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    llm_model: Optional[str] = None  # Provider default when unset

    # News API (newsdata.io)
    news_api_key: Optional[str] = None
    news_api_base_url: str = "https://newsdata.io/api/1/news"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
