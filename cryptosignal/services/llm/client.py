"""
LLM Client

One async generate() over Google Gemini, Anthropic Claude and OpenAI.
Providers are built only for configured API keys; the first configured
provider after the primary is kept as fallback.

Provider SDKs are optional (``pip install cryptosignal[llm]``) and are
imported on first use.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


# Fallback search order after the primary provider
PROVIDER_ORDER = (LLMProvider.GEMINI, LLMProvider.ANTHROPIC, LLMProvider.OPENAI)

DEFAULT_MODELS = {
    LLMProvider.GEMINI: "gemini-2.0-flash-001",
    LLMProvider.ANTHROPIC: "claude-3-5-haiku-latest",
    LLMProvider.OPENAI: "gpt-4o-mini",
}


@dataclass
class LLMConfig:
    """Provider keys and generation defaults."""

    provider: LLMProvider
    gemini_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    model: Optional[str] = None  # Primary provider only
    max_tokens: int = 1024
    temperature: float = 0.3

    def api_key(self, provider: LLMProvider) -> Optional[str]:
        return getattr(self, f"{provider.value}_api_key")

    def model_for(self, provider: LLMProvider) -> str:
        if self.model and provider == self.provider:
            return self.model
        return DEFAULT_MODELS[provider]


@dataclass
class LLMResponse:
    """Text returned by a provider."""

    content: str
    model: str
    provider: LLMProvider
    usage: dict = field(default_factory=dict)


class BaseLLMClient(ABC):
    """
    One provider.

    Subclasses implement _complete(); generate() fills in defaults and
    logs provider errors before re-raising them.
    """

    provider: LLMProvider

    def __init__(self, config: LLMConfig):
        self.config = config
        self._sdk_client = None

    @property
    def model(self) -> str:
        return self.config.model_for(self.provider)

    @property
    def api_key(self) -> Optional[str]:
        return self.config.api_key(self.provider)

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        response_format: Optional[str] = None,
    ) -> LLMResponse:
        """Generate a completion; response_format="json" requests a JSON object."""
        try:
            return await self._complete(
                system_prompt,
                user_prompt,
                temperature if temperature is not None else self.config.temperature,
                max_tokens if max_tokens is not None else self.config.max_tokens,
                response_format == "json",
            )
        except Exception as e:
            logger.error(f"{self.provider.value} API error ({self.model}): {e}")
            raise

    @abstractmethod
    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> LLMResponse:
        pass


class GeminiClient(BaseLLMClient):
    provider = LLMProvider.GEMINI

    def _model_handle(self):
        if self._sdk_client is None:
            try:
                import google.generativeai as genai
            except ImportError:
                raise RuntimeError(
                    "google-generativeai package not installed. Run: pip install google-generativeai"
                )
            genai.configure(api_key=self.api_key)
            self._sdk_client = genai.GenerativeModel(self.model)
        return self._sdk_client

    async def _complete(self, system_prompt, user_prompt, temperature, max_tokens, json_mode):
        handle = self._model_handle()
        prompt = f"{system_prompt}\n\n---\n\n{user_prompt}"
        generation_config = {
            "temperature": temperature,
            "max_output_tokens": max_tokens,
            "response_mime_type": "application/json" if json_mode else "text/plain",
        }

        # The SDK call blocks; keep it off the event loop
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            None, lambda: handle.generate_content(prompt, generation_config=generation_config)
        )

        usage = getattr(response, "usage_metadata", None)
        return LLMResponse(
            content=response.text,
            model=self.model,
            provider=self.provider,
            usage={
                "prompt_tokens": getattr(usage, "prompt_token_count", 0),
                "completion_tokens": getattr(usage, "candidates_token_count", 0),
            },
        )


class AnthropicClient(BaseLLMClient):
    provider = LLMProvider.ANTHROPIC

    def _client(self):
        if self._sdk_client is None:
            try:
                import anthropic
            except ImportError:
                raise RuntimeError("anthropic package not installed. Run: pip install anthropic")
            self._sdk_client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._sdk_client

    async def _complete(self, system_prompt, user_prompt, temperature, max_tokens, json_mode):
        # Claude has no JSON mode; the prompt asks for JSON only
        message = await self._client().messages.create(
            model=self.model,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return LLMResponse(
            content=message.content[0].text,
            model=self.model,
            provider=self.provider,
            usage={
                "input_tokens": message.usage.input_tokens,
                "output_tokens": message.usage.output_tokens,
            },
        )


class OpenAIClient(BaseLLMClient):
    provider = LLMProvider.OPENAI

    def _client(self):
        if self._sdk_client is None:
            try:
                import openai
            except ImportError:
                raise RuntimeError("openai package not installed. Run: pip install openai")
            self._sdk_client = openai.AsyncOpenAI(api_key=self.api_key)
        return self._sdk_client

    async def _complete(self, system_prompt, user_prompt, temperature, max_tokens, json_mode):
        request = dict(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        completion = await self._client().chat.completions.create(**request)
        return LLMResponse(
            content=completion.choices[0].message.content,
            model=self.model,
            provider=self.provider,
            usage={
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
            },
        )


PROVIDER_CLIENTS = {
    LLMProvider.GEMINI: GeminiClient,
    LLMProvider.ANTHROPIC: AnthropicClient,
    LLMProvider.OPENAI: OpenAIClient,
}


class LLMClient:
    """
    Primary provider with a single fallback.

    With no keys at all the client is unconfigured and generate() raises
    RuntimeError; callers check is_configured first.
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self._primary: Optional[BaseLLMClient] = None
        self._fallback: Optional[BaseLLMClient] = None

        if config.api_key(config.provider):
            self._primary = PROVIDER_CLIENTS[config.provider](config)

        backup = next(
            (p for p in PROVIDER_ORDER if p != config.provider and config.api_key(p)),
            None,
        )
        if backup is not None:
            self._fallback = PROVIDER_CLIENTS[backup](config)

        if not self.is_configured:
            logger.warning("No LLM API keys configured. AI trade analysis disabled.")

    @property
    def is_configured(self) -> bool:
        return self._primary is not None or self._fallback is not None

    def get_active_provider(self) -> Optional[LLMProvider]:
        """Provider tried first, if any."""
        active = self._primary or self._fallback
        return active.provider if active else None

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        response_format: Optional[str] = None,
    ) -> LLMResponse:
        """Generate with the primary provider, switching to the fallback on error."""
        if not self.is_configured:
            raise RuntimeError("No LLM providers configured")

        args = (system_prompt, user_prompt, temperature, max_tokens, response_format)

        if self._primary is not None:
            try:
                return await self._primary.generate(*args)
            except Exception as e:
                if self._fallback is None:
                    raise
                logger.warning(
                    f"Primary LLM ({self._primary.provider.value}) failed: {e}, "
                    f"trying {self._fallback.provider.value}"
                )

        return await self._fallback.generate(*args)


_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the LLM client from settings."""
    global _llm_client
    if _llm_client is None:
        from cryptosignal.core.config import settings

        _llm_client = LLMClient(
            LLMConfig(
                provider=LLMProvider(settings.llm_primary_provider.lower()),
                gemini_api_key=settings.gemini_api_key,
                anthropic_api_key=settings.anthropic_api_key,
                openai_api_key=settings.openai_api_key,
                model=settings.llm_model,
            )
        )
    return _llm_client
