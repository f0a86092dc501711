"""
LLM Client Layer

CONTRACT:
    Input:  system prompt + user prompt
    Output: LLMResponse (raw text content)

RESPONSIBILITIES:
    - Unified interface over Gemini, Claude and GPT
    - Primary provider with fallback to the next configured one
    - Prompt templates for news-conditioned trade analysis

FALLBACK BEHAVIOR:
    - Without API keys no client is configured and the sentiment
      collaborator is disabled; Trend Following uses its technical rule
"""

from cryptosignal.services.llm.client import (
    LLMClient,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    get_llm_client,
)
from cryptosignal.services.llm.prompts import (
    TRADE_ANALYSIS_SYSTEM_PROMPT,
    format_trade_analysis_prompt,
)

__all__ = [
    "LLMClient",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "get_llm_client",
    "TRADE_ANALYSIS_SYSTEM_PROMPT",
    "format_trade_analysis_prompt",
]
