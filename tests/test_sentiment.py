import pytest

from cryptosignal.services.base import InvalidResponseError, UpstreamUnavailableError
from cryptosignal.services.llm import LLMClient, LLMConfig, LLMProvider, LLMResponse
from cryptosignal.services.llm.client import AnthropicClient, BaseLLMClient
from cryptosignal.services.llm.prompts import (
    NO_NEWS_CONTEXT,
    format_trade_analysis_prompt,
)
from cryptosignal.services.news import (
    NewsArticle,
    NewsSentiment,
    get_coin_name,
    parse_newsdata,
    parse_rss,
    score_headline,
)
from cryptosignal.services.sentiment import LLMSentimentService, extract_json

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel>
  <item>
    <title>Bitcoin rally extends as ETF inflows hit record</title>
    <link>https://example.com/a</link>
    <pubDate>Sat, 04 Feb 2026 10:30:00 GMT</pubDate>
    <source url="https://example.com">Example Wire</source>
  </item>
  <item>
    <title>Exchange hack triggers crypto selloff</title>
    <link>https://example.com/b</link>
  </item>
  <item>
    <link>https://example.com/no-title</link>
  </item>
</channel></rss>"""


class StubLLM:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.prompts = []

    async def generate(self, system_prompt, user_prompt, **kwargs):
        self.prompts.append(user_prompt)
        if self.error:
            raise self.error
        return LLMResponse(
            content=self.content, model="stub", provider=LLMProvider.GEMINI, usage={}
        )


class StubNews:
    def __init__(self, articles):
        self.articles = articles
        self.closed = False

    async def get_symbol_news(self, symbol):
        return self.articles

    async def close(self):
        self.closed = True


def article(title, summary=None):
    return NewsArticle(
        title=title, source="test", url="https://example.com", published_at="", summary=summary
    )


class TestExtractJson:
    def test_plain_object(self):
        assert extract_json('{"decision": "BUY", "confidence": 80}') == {
            "decision": "BUY",
            "confidence": 80,
        }

    def test_fenced_json(self):
        content = 'Here you go:\n```json\n{"decision": "SELL"}\n```\nGood luck'
        assert extract_json(content) == {"decision": "SELL"}

    def test_unlabelled_fence(self):
        assert extract_json('```\n{"decision": "HOLD"}\n```') == {"decision": "HOLD"}

    def test_object_inside_prose(self):
        content = 'My analysis: {"decision": "BUY", "reasoning": "up"} -- end'
        assert extract_json(content)["reasoning"] == "up"

    @pytest.mark.parametrize("content", ["", "no json here", "{broken", "[1, 2]", None])
    def test_unparseable_raises(self, content):
        with pytest.raises(ValueError):
            extract_json(content)


class TestLLMSentimentService:
    async def test_returns_payload_with_evidence_count(self):
        llm = StubLLM('```json\n{"decision": "BUY", "confidence": 75, "reasoning": "ok", "newsCount": 99}\n```')
        news = StubNews([article("Bitcoin surges"), article("ETF approved", "SEC decision")])
        service = LLMSentimentService(llm_client=llm, news_service=news)

        payload = await service.analyze("BTC")

        assert payload["decision"] == "BUY"
        assert payload["evidence_count"] == 2
        assert "newsCount" not in payload
        assert "Bitcoin surges" in llm.prompts[0]
        assert "SEC decision" in llm.prompts[0]

    async def test_llm_failure_is_upstream_error(self):
        service = LLMSentimentService(
            llm_client=StubLLM(error=RuntimeError("quota")), news_service=StubNews([])
        )

        with pytest.raises(UpstreamUnavailableError):
            await service.analyze("ETH")

    async def test_unparseable_reply_is_invalid_response(self):
        service = LLMSentimentService(
            llm_client=StubLLM("I think you should buy."), news_service=StubNews([])
        )

        with pytest.raises(InvalidResponseError):
            await service.analyze("ETH")

    async def test_close_closes_news_session(self):
        news = StubNews([])
        await LLMSentimentService(llm_client=StubLLM("{}"), news_service=news).close()

        assert news.closed


class TestPrompts:
    def test_no_news_note(self):
        prompt = format_trade_analysis_prompt("SOL", [], coin_name="Solana")

        assert "SOL (Solana)" in prompt
        assert NO_NEWS_CONTEXT in prompt

    def test_headlines_are_numbered(self):
        prompt = format_trade_analysis_prompt("BTC", [article("First"), article("Second")])

        assert "1. First" in prompt
        assert "2. Second" in prompt


class TestNews:
    def test_coin_names(self):
        assert get_coin_name("btc") == "Bitcoin"
        assert get_coin_name("XRP") == "Ripple"
        assert get_coin_name("PEPE") == "PEPE"

    def test_score_headline(self):
        assert score_headline("Bitcoin rally continues")[0] == NewsSentiment.BULLISH
        assert score_headline("Exchange hack sparks crash")[0] == NewsSentiment.BEARISH
        assert score_headline("Ethereum developers meet") == (NewsSentiment.NEUTRAL, 0.0)

    def test_parse_rss(self):
        articles = parse_rss(RSS)

        assert len(articles) == 2
        assert articles[0].source == "Example Wire"
        assert articles[0].published_at.startswith("2026-02-04T10:30:00")
        assert articles[0].sentiment == NewsSentiment.BULLISH
        assert articles[1].source == "Google News"
        assert articles[1].sentiment == NewsSentiment.BEARISH

    def test_parse_rss_limits_results(self):
        assert len(parse_rss(RSS, num_results=1)) == 1

    def test_parse_rss_malformed_date_falls_back_to_now(self):
        rss = "<rss><channel><item><title>Solana upgrade ships</title>"
        rss += "<pubDate>yesterday</pubDate></item></channel></rss>"

        article = parse_rss(rss)[0]

        assert article.published_at.endswith("+00:00")
        assert article.url == ""

    def test_parse_newsdata(self):
        payload = {
            "results": [
                {"title": None},
                {
                    "title": "Ethereum ETF outflows deepen",
                    "source_id": "coindesk",
                    "link": "https://example.com/eth",
                    "pubDate": "2026-02-04 10:30:00",
                    "description": "Funds saw outflows for a third week.",
                },
            ]
        }

        articles = parse_newsdata(payload)

        assert len(articles) == 1
        assert articles[0].source == "coindesk"
        assert articles[0].summary.startswith("Funds")
        assert articles[0].sentiment == NewsSentiment.BEARISH
        assert articles[0].to_dict()["sentiment"] == "bearish"

    def test_parse_newsdata_empty(self):
        assert parse_newsdata({"results": None}) == []


class StubProvider(BaseLLMClient):
    provider = LLMProvider.OPENAI

    def __init__(self, config, error=None):
        super().__init__(config)
        self.error = error
        self.calls = 0

    async def _complete(self, system_prompt, user_prompt, temperature, max_tokens, json_mode):
        self.calls += 1
        if self.error:
            raise self.error
        return LLMResponse(content="{}", model=self.model, provider=self.provider, usage={})


class TestLLMClient:
    def test_unconfigured_without_keys(self):
        client = LLMClient(LLMConfig(provider=LLMProvider.GEMINI))

        assert client.is_configured is False
        assert client.get_active_provider() is None

    async def test_generate_without_keys_raises(self):
        client = LLMClient(LLMConfig(provider=LLMProvider.GEMINI))

        with pytest.raises(RuntimeError):
            await client.generate("system", "user")

    def test_fallback_provider_used_when_primary_key_missing(self):
        client = LLMClient(LLMConfig(provider=LLMProvider.GEMINI, anthropic_api_key="key"))

        assert client.is_configured
        assert isinstance(client._fallback, AnthropicClient)
        assert client.get_active_provider() == LLMProvider.ANTHROPIC

    def test_model_override_applies_to_primary_only(self):
        config = LLMConfig(provider=LLMProvider.OPENAI, model="gpt-custom")

        assert config.model_for(LLMProvider.OPENAI) == "gpt-custom"
        assert config.model_for(LLMProvider.ANTHROPIC) != "gpt-custom"

    async def test_primary_failure_switches_to_fallback(self):
        config = LLMConfig(provider=LLMProvider.OPENAI)
        client = LLMClient(config)
        client._primary = StubProvider(config, error=RuntimeError("503"))
        client._fallback = StubProvider(config)

        response = await client.generate("system", "user")

        assert response.content == "{}"
        assert client._primary.calls == 1
        assert client._fallback.calls == 1

    async def test_primary_failure_without_fallback_propagates(self):
        config = LLMConfig(provider=LLMProvider.OPENAI)
        client = LLMClient(config)
        client._primary = StubProvider(config, error=RuntimeError("503"))

        with pytest.raises(RuntimeError, match="503"):
            await client.generate("system", "user")
