"""Exception hierarchy for failed backend invocations.

Every LiteLLM or transport failure is mapped to one of these types so the
gateway handler can report the failure without inspecting vendor internals.
None of them are retried.
"""


class BackendInvocationError(Exception):
    """Base exception for a failed call to an LLM backend.

    Attributes:
        message: Human-readable error description, surfaced to the caller.
        provider: Provider name (e.g. "openai", "anthropic").  ``None`` when
            the provider could not be determined.
        original_error: The upstream exception that caused this error, if any.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.message = message
        self.provider = provider
        self.original_error = original_error
        super().__init__(message)


class RateLimitError(BackendInvocationError):
    """The backend returned HTTP 429 or reported an exhausted quota."""


class AuthError(BackendInvocationError):
    """Authentication or authorisation failure (HTTP 401 / 403)."""


class TimeoutError(BackendInvocationError):  # noqa: A001 – intentionally shadows the built-in
    """The backend did not answer within the configured timeout."""


class InvalidRequestError(BackendInvocationError):
    """The backend rejected the request as malformed or unsupported (HTTP 400 / 422).

    Also raised for unknown models and for providers with no registered
    backend.
    """


class ProviderUnavailableError(BackendInvocationError):
    """The backend is down or unreachable (HTTP 5xx / network error)."""
