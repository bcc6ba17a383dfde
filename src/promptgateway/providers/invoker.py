from collections.abc import Iterable, Sequence

from promptgateway.config import Settings
from promptgateway.providers.backends import (
    AnthropicBackend,
    Backend,
    GeminiBackend,
    OpenAIBackend,
)
from promptgateway.providers.errors import InvalidRequestError
from promptgateway.providers.models import Provider, ProviderResponse


class LLMInvoker:
    """Routes a completion to the backend registered for a provider.

    Dispatch is a plain table lookup keyed by :class:`Provider`; there is
    exactly one backend per provider.
    """

    def __init__(self, backends: Iterable[Backend]) -> None:
        self._backends: dict[Provider, Backend] = {b.provider: b for b in backends}

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMInvoker":
        return cls(
            [
                OpenAIBackend(
                    default_model=settings.openai_default_model,
                    api_key=settings.openai_api_key,
                    timeout=settings.llm_timeout,
                ),
                AnthropicBackend(
                    default_model=settings.anthropic_default_model,
                    api_key=settings.anthropic_api_key,
                    timeout=settings.llm_timeout,
                ),
                GeminiBackend(
                    default_model=settings.gemini_default_model,
                    api_key=settings.gemini_api_key,
                    timeout=settings.llm_timeout,
                ),
            ]
        )

    @property
    def providers(self) -> frozenset[Provider]:
        return frozenset(self._backends)

    def backend_for(self, provider: Provider) -> Backend:
        try:
            return self._backends[provider]
        except KeyError:
            raise InvalidRequestError(
                f"No backend registered for provider '{provider}'", provider=str(provider)
            ) from None

    def default_model(self, provider: Provider) -> str:
        return self.backend_for(provider).default_model

    async def invoke(
        self,
        messages: Sequence[dict[str, str]],
        prompt: str,
        provider: Provider,
        model: str | None = None,
    ) -> ProviderResponse:
        """Complete *prompt* on *provider*, after any prior *messages*."""
        backend = self.backend_for(provider)
        return await backend.complete(prompt, model=model, messages=messages)
