"""
LLM Prompt Templates

Prompt for the news-conditioned trade analysis used by Trend Following.

RULES (enforced in the prompt):
- Decision is one of BUY, SELL, HOLD
- Confidence is an integer percentage
- Response is a single JSON object, nothing else
"""

from typing import Optional, Sequence

# =============================================================================
# TRADE ANALYSIS PROMPTS
# =============================================================================

TRADE_ANALYSIS_SYSTEM_PROMPT = """You are a professional cryptocurrency trading analyst.

YOUR ROLE:
- Read the latest news headlines for one cryptocurrency
- Judge how the news affects short-term price direction
- Recommend BUY, SELL or HOLD with a confidence percentage

RULES:
1. Base the decision on the provided news and general market knowledge.
2. Confidence is an integer from 0 to 100. BUY or SELL needs at least 50.
3. If the news is mixed or missing, prefer HOLD and say why.
4. Always mention the main risk factors.

OUTPUT FORMAT:
Respond ONLY with valid JSON, no additional text:
{
  "decision": "BUY" | "SELL" | "HOLD",
  "confidence": <integer 0-100>,
  "reasoning": "<brief explanation based on news sentiment and market analysis>",
  "newsImpact": "<how the news affects the decision>",
  "riskLevel": "LOW" | "MEDIUM" | "HIGH",
  "timeframe": "<e.g. short-term, 1-3 days>"
}"""

TRADE_ANALYSIS_USER_PROMPT_TEMPLATE = """Analyze {symbol} ({coin_name}) for trading based on the following real-time news:
{news_context}

Consider:
- Overall sentiment of the news (bullish, bearish, neutral)
- Market trends indicated by the news
- Risk factors mentioned in the news"""

NO_NEWS_CONTEXT = "\nNote: No recent news available. Base analysis on general market knowledge."


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def format_news_context(articles: Sequence) -> str:
    """Numbered headline list, with descriptions where present."""
    if not articles:
        return NO_NEWS_CONTEXT

    lines = ["", "Latest News Headlines:"]
    for index, article in enumerate(articles, start=1):
        lines.append(f"{index}. {article.title}")
        if article.summary:
            lines.append(f"   {article.summary}")
    return "\n".join(lines)


def format_trade_analysis_prompt(
    symbol: str,
    articles: Sequence,
    coin_name: Optional[str] = None,
) -> str:
    """Format the trade analysis prompt with news headlines."""
    return TRADE_ANALYSIS_USER_PROMPT_TEMPLATE.format(
        symbol=symbol,
        coin_name=coin_name or symbol,
        news_context=format_news_context(articles),
    )
