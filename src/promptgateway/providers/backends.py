"""LiteLLM-backed completion clients, one per supported provider.

LiteLLM already normalises the vendor wire formats, so each backend only
decides how its models are addressed, which credentials it sends, and which
model it falls back to.  The shared :class:`Backend` base adds what LiteLLM
does *not* provide out of the box:

* Typed exception hierarchy (:mod:`promptgateway.providers.errors`)
* OpenTelemetry spans using GenAI semantic conventions
* Structured logging via structlog
* A cost estimate attached to every response

A call is made exactly once; failures are mapped and raised, never retried.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import litellm
import structlog
from opentelemetry import trace
from opentelemetry.trace import StatusCode
from pydantic import SecretStr

from promptgateway.providers.errors import (
    AuthError,
    BackendInvocationError,
    InvalidRequestError,
    ProviderUnavailableError,
    RateLimitError,
    TimeoutError,
)
from promptgateway.providers.models import Provider, ProviderResponse

_log = structlog.get_logger(__name__)
_tracer = trace.get_tracer(__name__)


class Backend(ABC):
    """A single LLM vendor reachable through LiteLLM.

    Args:
        default_model: Model used when the caller does not name one.
        api_key: Vendor API key.  ``None`` lets LiteLLM fall back to the
            vendor's standard environment variable.
        timeout: Per-request timeout in seconds passed to LiteLLM.
    """

    provider: Provider

    def __init__(
        self,
        default_model: str,
        api_key: SecretStr | None = None,
        timeout: int = 60,
    ) -> None:
        self.default_model = default_model
        self._api_key = api_key
        self._timeout = timeout

    @abstractmethod
    def _litellm_model(self, model: str) -> str:
        """Return the LiteLLM model string addressing *model* on this backend."""

    def resolve_model(self, model: str | None) -> str:
        return model or self.default_model

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        messages: Sequence[dict[str, str]] = (),
    ) -> ProviderResponse:
        """Send *prompt* after the prior *messages* and return the completion.

        Args:
            prompt: Text of the new user turn.
            model: Model identifier; the backend default when ``None``.
            messages: Earlier conversation turns, each with ``"role"`` and
                ``"content"`` keys.

        Raises:
            RateLimitError: Backend returned HTTP 429.
            AuthError: API key missing or invalid (HTTP 401 / 403).
            TimeoutError: Request exceeded the configured timeout.
            InvalidRequestError: Request rejected as malformed (HTTP 400 / 422).
            ProviderUnavailableError: Backend down or unreachable (5xx / network).
        """
        model_name = self.resolve_model(model)
        conversation = [*messages, {"role": "user", "content": prompt}]
        start_time = time.monotonic()

        with _tracer.start_as_current_span("llm.complete") as span:
            span.set_attribute("gen_ai.system", self.provider.value)
            span.set_attribute("gen_ai.request.model", model_name)

            log = _log.bind(provider=self.provider.value, model=model_name)
            log.info("llm_request_start", message_count=len(conversation))

            try:
                raw = await litellm.acompletion(**self._to_litellm_format(model_name, conversation))
                response = self._parse_response(raw)

            except Exception as exc:
                mapped = self._map_error(exc)
                span.record_exception(exc)
                span.set_status(StatusCode.ERROR, mapped.message)
                log.error(
                    "llm_request_error",
                    error_type=type(mapped).__name__,
                    error=mapped.message,
                )
                if mapped is exc:
                    raise
                raise mapped from exc

            finally:
                duration_ms = round((time.monotonic() - start_time) * 1000, 2)
                log.info("llm_request_complete", duration_ms=duration_ms)

            if response.usage:
                span.set_attribute("gen_ai.usage.input_tokens", response.usage["input_tokens"])
                span.set_attribute("gen_ai.usage.output_tokens", response.usage["output_tokens"])
            if response.finish_reason:
                span.set_attribute("gen_ai.response.finish_reasons", response.finish_reason)

            return response

    # ------------------------------------------------------------------
    # Format conversion
    # ------------------------------------------------------------------

    def _to_litellm_format(
        self, model: str, messages: list[dict[str, str]]
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": self._litellm_model(model),
            "messages": messages,
            "timeout": self._timeout,
        }
        if self._api_key is not None:
            params["api_key"] = self._api_key.get_secret_value()
        return params

    def _parse_response(self, raw: Any) -> ProviderResponse:
        """Convert a LiteLLM completion response to :class:`ProviderResponse`."""
        choice = raw.choices[0]
        raw_usage = getattr(raw, "usage", None)
        usage: dict[str, int] | None = None
        if raw_usage is not None:
            usage = {
                "input_tokens": getattr(raw_usage, "prompt_tokens", 0) or 0,
                "output_tokens": getattr(raw_usage, "completion_tokens", 0) or 0,
            }
        return ProviderResponse(
            text=choice.message.content or "",
            model=getattr(raw, "model", None),
            finish_reason=getattr(choice, "finish_reason", None),
            usage=usage,
            cost=self._estimate_cost(raw),
        )

    def _estimate_cost(self, raw: Any) -> float | None:
        """Price *raw* with LiteLLM's model cost map; ``None`` if unpriced."""
        try:
            return float(litellm.completion_cost(completion_response=raw))
        except Exception as exc:
            _log.warning(
                "cost_estimation_failed",
                provider=self.provider.value,
                model=getattr(raw, "model", None),
                error=str(exc),
            )
            return None

    # ------------------------------------------------------------------
    # Error mapping
    # ------------------------------------------------------------------

    def _map_error(self, error: Exception) -> BackendInvocationError:
        """Map a LiteLLM exception to a typed :class:`BackendInvocationError`.

        The vendor message is carried through unchanged; the type and
        ``provider`` attribute say where it came from.

        ===================================  ==============================
        LiteLLM exception                    Gateway exception
        ===================================  ==============================
        ``litellm.RateLimitError``           :class:`RateLimitError`
        ``litellm.AuthenticationError``      :class:`AuthError`
        ``litellm.Timeout``                  :class:`TimeoutError`
        ``litellm.BadRequestError``          :class:`InvalidRequestError`
        ``litellm.NotFoundError``            :class:`InvalidRequestError`
        ``litellm.ServiceUnavailableError``  :class:`ProviderUnavailableError`
        ``litellm.APIConnectionError``       :class:`ProviderUnavailableError`
        ``litellm.APIError`` (catch-all)     :class:`ProviderUnavailableError`
        ===================================  ==============================
        """
        if isinstance(error, BackendInvocationError):
            return error

        provider = self.provider.value

        if isinstance(error, litellm.RateLimitError):
            return RateLimitError(message=str(error), provider=provider, original_error=error)

        if isinstance(error, litellm.AuthenticationError):
            return AuthError(
                message=str(error),
                provider=provider,
                original_error=error,
            )

        if isinstance(error, litellm.Timeout):
            return TimeoutError(
                message=str(error),
                provider=provider,
                original_error=error,
            )

        # BadRequestError is the parent of ContextWindowExceededError in LiteLLM.
        if isinstance(error, litellm.BadRequestError | litellm.NotFoundError):
            return InvalidRequestError(
                message=str(error),
                provider=provider,
                original_error=error,
            )

        if isinstance(
            error,
            litellm.ServiceUnavailableError | litellm.APIConnectionError | litellm.APIError,
        ):
            return ProviderUnavailableError(
                message=str(error),
                provider=provider,
                original_error=error,
            )

        return BackendInvocationError(
            message=str(error),
            provider=provider,
            original_error=error,
        )


class OpenAIBackend(Backend):
    provider = Provider.OPENAI

    def _litellm_model(self, model: str) -> str:
        return model


class AnthropicBackend(Backend):
    provider = Provider.ANTHROPIC

    def _litellm_model(self, model: str) -> str:
        return model


class GeminiBackend(Backend):
    """Google AI Studio models, addressed as ``gemini/<model>`` in LiteLLM."""

    provider = Provider.GEMINI

    def _litellm_model(self, model: str) -> str:
        return f"gemini/{model}"
