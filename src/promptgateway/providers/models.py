"""Identifiers and result types shared by the provider layer and the gateway."""

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class Provider(StrEnum):
    """Closed set of LLM backends a request can be routed to."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


class Model(StrEnum):
    """Closed set of model identifiers a caller may request.

    Models are not tied to a provider here: pairing ``provider="gemini"`` with
    ``model="gpt-4"`` is accepted and forwarded unchanged.
    """

    GPT_35_TURBO = "gpt-3.5-turbo"
    GPT_4 = "gpt-4"
    CLAUDE_3_OPUS = "claude-3-opus-20240229"
    GEMINI_15_PRO = "gemini-1.5-pro"


@dataclass(frozen=True)
class ProviderResponse:
    """Normalised result of a single backend completion.

    Attributes:
        text: Generated text.
        model: Model name as reported by the backend (may differ from the
            requested name due to aliasing).
        finish_reason: Stop reason reported by the backend, e.g. ``"stop"``.
        usage: Token counts ``{"input_tokens": N, "output_tokens": M}`` when
            the backend reports them.
        cost: Estimated cost in USD, ``None`` when no price is known.
    """

    text: str
    model: str | None = None
    finish_reason: str | None = None
    usage: dict[str, int] | None = None
    cost: float | None = None

    @property
    def total_tokens(self) -> int:
        if not self.usage:
            return 0
        return self.usage.get("input_tokens", 0) + self.usage.get("output_tokens", 0)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
