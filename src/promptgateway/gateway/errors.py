class GatewayError(Exception):
    """Base class for failures raised by the gateway itself."""


class MalformedBodyError(GatewayError):
    """A text request body could not be decoded as JSON."""


class MissingPromptError(GatewayError):
    """A request passed schema validation but carries no usable prompt."""
