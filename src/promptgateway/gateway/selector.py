import random

from promptgateway.providers.models import Provider

# Providers drawn from when the caller does not name one.  Gemini is only
# reachable by asking for it explicitly.
DEFAULT_PROVIDERS: tuple[Provider, Provider] = (Provider.OPENAI, Provider.ANTHROPIC)


class ProviderSelector:
    """Resolves an optional requested provider to a concrete one.

    Args:
        rng: Source of randomness for the default choice.  Pass a seeded
            ``random.Random`` for reproducible selection.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def select(self, requested: Provider | None) -> Provider:
        if requested is not None:
            return requested
        first, second = DEFAULT_PROVIDERS
        return first if self._rng.random() < 0.5 else second
