"""AWS Lambda entry point (API Gateway proxy integration).

Configure the function handler as ``promptgateway.lambda_function.handler``.
Tracing is left to the Lambda runtime; only structured logging is set up.
"""

import asyncio
from typing import Any

from promptgateway.config import settings
from promptgateway.gateway import GatewayHandler
from promptgateway.observability import configure_logging

configure_logging(settings.log_level)

# Built once per container and reused across warm invocations.
gateway = GatewayHandler.from_settings(settings)


def handler(event: Any, context: Any) -> dict[str, Any]:
    return asyncio.run(gateway.handle(event)).to_event()
