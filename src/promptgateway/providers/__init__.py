"""LLM backend abstraction layer.

Public surface area for the providers package.  Import from here rather than
from the individual submodules so internal structure can change freely.

Example::

    from promptgateway.providers import LLMInvoker, Provider

    invoker = LLMInvoker.from_settings(settings)
    response = await invoker.invoke([], "Hello", Provider.ANTHROPIC)
    print(response.text)
"""

from promptgateway.providers.backends import (
    AnthropicBackend,
    Backend,
    GeminiBackend,
    OpenAIBackend,
)
from promptgateway.providers.errors import (
    AuthError,
    BackendInvocationError,
    InvalidRequestError,
    ProviderUnavailableError,
    RateLimitError,
    TimeoutError,
)
from promptgateway.providers.invoker import LLMInvoker
from promptgateway.providers.models import Model, Provider, ProviderResponse

__all__ = [
    # Models
    "Provider",
    "Model",
    "ProviderResponse",
    # Backends
    "Backend",
    "OpenAIBackend",
    "AnthropicBackend",
    "GeminiBackend",
    "LLMInvoker",
    # Errors
    "BackendInvocationError",
    "RateLimitError",
    "AuthError",
    "TimeoutError",
    "InvalidRequestError",
    "ProviderUnavailableError",
]
