"""Tests for provider dispatch in LLMInvoker."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from promptgateway.config import Settings
from promptgateway.providers import (
    AnthropicBackend,
    GeminiBackend,
    InvalidRequestError,
    LLMInvoker,
    OpenAIBackend,
    Provider,
    ProviderResponse,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key="sk-openai",
        openai_default_model="gpt-4",
        llm_timeout=12,
    )


class TestFromSettings:
    def test_every_provider_registered(self, settings: Settings) -> None:
        invoker = LLMInvoker.from_settings(settings)
        assert invoker.providers == frozenset(Provider)

    def test_backend_types(self, settings: Settings) -> None:
        invoker = LLMInvoker.from_settings(settings)
        assert isinstance(invoker.backend_for(Provider.OPENAI), OpenAIBackend)
        assert isinstance(invoker.backend_for(Provider.ANTHROPIC), AnthropicBackend)
        assert isinstance(invoker.backend_for(Provider.GEMINI), GeminiBackend)

    def test_default_models_from_settings(self, settings: Settings) -> None:
        invoker = LLMInvoker.from_settings(settings)
        assert invoker.default_model(Provider.OPENAI) == "gpt-4"
        assert invoker.default_model(Provider.ANTHROPIC) == "claude-3-opus-20240229"
        assert invoker.default_model(Provider.GEMINI) == "gemini-1.5-pro"

    def test_credentials_and_timeout_reach_litellm(self, settings: Settings) -> None:
        invoker = LLMInvoker.from_settings(settings)
        backend = invoker.backend_for(Provider.OPENAI)
        params = backend._to_litellm_format("gpt-4", [{"role": "user", "content": "x"}])
        assert params["api_key"] == "sk-openai"
        assert params["timeout"] == 12


class TestInvoke:
    async def test_dispatches_to_selected_backend(self, mocker: Any) -> None:
        openai = OpenAIBackend(default_model="gpt-3.5-turbo")
        anthropic = AnthropicBackend(default_model="claude-3-opus-20240229")
        expected = ProviderResponse(text="from claude")
        openai_complete = mocker.patch.object(openai, "complete", new=AsyncMock())
        anthropic_complete = mocker.patch.object(
            anthropic, "complete", new=AsyncMock(return_value=expected)
        )

        invoker = LLMInvoker([openai, anthropic])
        response = await invoker.invoke([], "hello", Provider.ANTHROPIC)

        assert response is expected
        anthropic_complete.assert_awaited_once_with("hello", model=None, messages=[])
        openai_complete.assert_not_awaited()

    async def test_model_forwarded(self, mocker: Any) -> None:
        gemini = GeminiBackend(default_model="gemini-1.5-pro")
        complete = mocker.patch.object(
            gemini, "complete", new=AsyncMock(return_value=ProviderResponse(text="ok"))
        )
        await LLMInvoker([gemini]).invoke([], "hi", Provider.GEMINI, "gpt-4")
        complete.assert_awaited_once_with("hi", model="gpt-4", messages=[])

    async def test_unregistered_provider_rejected(self) -> None:
        invoker = LLMInvoker([OpenAIBackend(default_model="gpt-3.5-turbo")])
        with pytest.raises(InvalidRequestError, match="gemini"):
            await invoker.invoke([], "hi", Provider.GEMINI)

    def test_default_model_for_unregistered_provider_rejected(self) -> None:
        with pytest.raises(InvalidRequestError):
            LLMInvoker([]).default_model(Provider.OPENAI)
