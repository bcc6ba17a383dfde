from promptgateway.gateway.errors import GatewayError, MalformedBodyError, MissingPromptError
from promptgateway.gateway.handler import GatewayHandler, GatewayResponse
from promptgateway.gateway.selector import DEFAULT_PROVIDERS, ProviderSelector
from promptgateway.gateway.validation import (
    IncomingRequest,
    ValidationFailure,
    parse_body,
    validate_request,
)

__all__ = [
    "DEFAULT_PROVIDERS",
    "GatewayError",
    "GatewayHandler",
    "GatewayResponse",
    "IncomingRequest",
    "MalformedBodyError",
    "MissingPromptError",
    "ProviderSelector",
    "ValidationFailure",
    "parse_body",
    "validate_request",
]
