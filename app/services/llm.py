# =============================================================================
# Multi-Provider Chat Completion — Pluggable AI Backend
# =============================================================================
#
# Provides a common interface for text completions, with concrete
# implementations for Google Gemini (REST), Anthropic (Claude) and
# OpenAI-compatible APIs (DeepSeek, Qwen, GLM-5, OpenAI itself).
#
# Every provider takes ONE composed prompt and returns raw completion text.
# Transport failures, timeouts, non-2xx statuses and empty/malformed
# completions all surface as UpstreamServiceError. Nothing is retried.
#
# ARCHITECTURE:
#   LLMProvider (Protocol)
#   ├── GeminiProvider           — generateContent via httpx
#   ├── AnthropicProvider        — Claude via native Anthropic SDK
#   ├── OpenAICompatibleProvider — Any OpenAI-compatible API
#   └── get_llm_provider()       — Singleton factory, reads from config
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from anthropic import APIError as AnthropicAPIError
from anthropic import AsyncAnthropic
from openai import APIError as OpenAIAPIError
from openai import AsyncOpenAI

from app.config import settings
from app.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "chat"


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class LLMResponse:
    """
    Standardised response from any provider.

    Normalises the different response formats into a single structure
    that downstream code can consume.
    """

    content: str           # The generated text
    model: str             # Model identifier (e.g., "gemini-2.0-flash")
    input_tokens: int = 0  # Tokens consumed by the prompt
    output_tokens: int = 0  # Tokens generated in the response


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class LLMProvider(Protocol):
    """Interface every chat completion provider implements."""

    async def complete(self, prompt: str) -> LLMResponse:
        """
        Generate a completion for a single user prompt.

        Raises:
            UpstreamServiceError: The service failed or returned no text.
        """
        ...

    async def aclose(self) -> None:
        """Release the underlying HTTP client."""
        ...


def _resolve_key(*candidates: str | None, provider: str) -> str:
    for key in candidates:
        if key:
            return key
    raise ValueError(
        f"No API key configured for the {provider} provider. Set LLM_API_KEY "
        f"or the provider-specific key in .env"
    )


# ---------------------------------------------------------------------------
# Implementation 1: Google Gemini (REST)
# ---------------------------------------------------------------------------


class GeminiProvider:
    """
    Gemini via the Generative Language `generateContent` endpoint.

    The API key travels as a `key` query parameter, as the REST API expects.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = _resolve_key(
            api_key, settings.llm_api_key, settings.gemini_api_key,
            provider="gemini",
        )
        self._model = model or settings.llm_model
        self._base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=settings.upstream_timeout_seconds,
        )
        logger.info("Initialized GeminiProvider (model=%s)", self._model)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def complete(self, prompt: str) -> LLMResponse:
        """Generate a completion using Gemini."""
        url = f"{self._base_url}/models/{self._model}:generateContent"
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": settings.llm_temperature,
                "maxOutputTokens": settings.llm_max_tokens,
            },
        }

        try:
            response = await self._client.post(
                url, params={"key": self._api_key}, json=body,
            )
        except httpx.HTTPError as exc:
            raise UpstreamServiceError(
                f"Gemini request failed: {exc}", service=SERVICE_NAME,
            ) from exc

        if not response.is_success:
            logger.error(
                "Gemini returned %d: %s", response.status_code, response.text[:500],
            )
            raise UpstreamServiceError(
                f"Gemini returned HTTP {response.status_code}",
                service=SERVICE_NAME,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamServiceError(
                "Gemini returned a non-JSON body", service=SERVICE_NAME,
            ) from exc

        content = _gemini_text(data)
        if not content:
            raise UpstreamServiceError(
                "Gemini response contained no candidate text",
                service=SERVICE_NAME,
                status_code=response.status_code,
            )

        usage = data.get("usageMetadata") or {}
        return LLMResponse(
            content=content,
            model=data.get("modelVersion") or self._model,
            input_tokens=usage.get("promptTokenCount", 0),
            output_tokens=usage.get("candidatesTokenCount", 0),
        )


def _gemini_text(data: Any) -> str:
    """Pull candidates[0].content.parts[0].text, or "" if absent."""
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


# ---------------------------------------------------------------------------
# Implementation 2: Anthropic (Claude)
# ---------------------------------------------------------------------------


class AnthropicProvider:
    """
    Anthropic Claude provider using the native SDK.

    SDK retries are disabled so a failure surfaces immediately.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        resolved_key = _resolve_key(
            api_key, settings.llm_api_key, settings.anthropic_api_key,
            provider="anthropic",
        )
        self._client = AsyncAnthropic(
            api_key=resolved_key,
            timeout=settings.upstream_timeout_seconds,
            max_retries=0,
        )
        self._model = model or settings.llm_model
        logger.info("Initialized AnthropicProvider (model=%s)", self._model)

    async def aclose(self) -> None:
        await self._client.close()

    async def complete(self, prompt: str) -> LLMResponse:
        """Generate a completion using Claude."""
        try:
            response = await self._client.messages.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
            )
        except AnthropicAPIError as exc:
            raise UpstreamServiceError(
                f"Anthropic request failed: {exc}",
                service=SERVICE_NAME,
                status_code=getattr(exc, "status_code", None),
            ) from exc

        # Extract text from the first content block
        content = ""
        for block in response.content:
            if block.type == "text":
                content = block.text
                break

        if not content:
            raise UpstreamServiceError(
                "Anthropic response contained no text", service=SERVICE_NAME,
            )

        return LLMResponse(
            content=content,
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


# ---------------------------------------------------------------------------
# Implementation 3: OpenAI-Compatible (DeepSeek, Qwen, GLM-5, etc.)
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider:
    """
    Provider for any API that follows the OpenAI chat completions spec.

    Switching providers is a config change:
        LLM_PROVIDER=openai_compatible
        LLM_BASE_URL=https://api.deepseek.com/v1
        LLM_API_KEY=your-key
        LLM_MODEL=deepseek-chat
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        resolved_key = _resolve_key(
            api_key, settings.llm_api_key, settings.openai_api_key,
            provider="openai_compatible",
        )

        client_kwargs: dict = {
            "api_key": resolved_key,
            "timeout": settings.upstream_timeout_seconds,
            "max_retries": 0,
        }
        resolved_base_url = base_url or settings.llm_base_url
        if resolved_base_url:
            client_kwargs["base_url"] = resolved_base_url

        self._client = AsyncOpenAI(**client_kwargs)
        self._model = model or settings.llm_model

        logger.info(
            "Initialized OpenAICompatibleProvider (model=%s, base_url=%s)",
            self._model,
            resolved_base_url or "https://api.openai.com/v1",
        )

    async def aclose(self) -> None:
        await self._client.close()

    async def complete(self, prompt: str) -> LLMResponse:
        """Generate a completion using an OpenAI-compatible API."""
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
            )
        except OpenAIAPIError as exc:
            raise UpstreamServiceError(
                f"OpenAI-compatible request failed: {exc}",
                service=SERVICE_NAME,
                status_code=getattr(exc, "status_code", None),
            ) from exc

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""
        if not content:
            raise UpstreamServiceError(
                "OpenAI-compatible response contained no text",
                service=SERVICE_NAME,
            )

        # Token counts: OpenAI uses different field names than Anthropic
        usage = response.usage
        return LLMResponse(
            content=content,
            model=response.model or self._model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

_PROVIDERS = {
    "gemini": GeminiProvider,
    "anthropic": AnthropicProvider,
    "openai_compatible": OpenAICompatibleProvider,
}

# Lazy singleton — avoid re-creating client on every request
_provider: LLMProvider | None = None


def create_provider(provider_type: str) -> LLMProvider:
    """
    Build a provider by type name.

    Raises:
        ValueError: Unknown provider type, or its API key is missing.
    """
    try:
        provider_cls = _PROVIDERS[provider_type]
    except KeyError:
        raise ValueError(
            f"Unknown provider type '{provider_type}'. "
            f"Supported types: {sorted(_PROVIDERS)}"
        ) from None
    return provider_cls()


def get_llm_provider() -> LLMProvider:
    """Return the provider named by settings.llm_provider, creating it once."""
    global _provider
    if _provider is None:
        _provider = create_provider(settings.llm_provider)
    return _provider


async def close_llm_provider() -> None:
    """Close and forget the cached provider, if one was created."""
    global _provider
    if _provider is not None:
        provider, _provider = _provider, None
        await provider.aclose()
