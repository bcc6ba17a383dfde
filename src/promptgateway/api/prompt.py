"""POST /v1/prompt: HTTP front door to the gateway handler.

The raw request body is forwarded untouched as the event body, so decoding
and validation errors are reported by the handler exactly as they are for a
Lambda invocation.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from promptgateway.gateway import GatewayHandler

router = APIRouter(prefix="/v1", tags=["prompt"])

_log = structlog.get_logger(__name__)


def get_handler(request: Request) -> GatewayHandler:
    """Return the shared :class:`GatewayHandler` from ``app.state``."""
    handler: GatewayHandler | None = getattr(request.app.state, "handler", None)
    if handler is None:
        raise HTTPException(status_code=503, detail="Gateway not initialised")
    return handler


@router.post("/prompt", response_model=None)
async def prompt(
    request: Request,
    handler: GatewayHandler = Depends(get_handler),
) -> JSONResponse:
    """Answer a prompt with one of the configured LLM providers.

    Body: ``{"prompt": str, "threadID"?: str, "provider"?: str, "model"?: str}``.
    Responds 200 with ``{"provider", "response"}``, 400 for an invalid body
    and 500 for any other failure.
    """
    raw = await request.body()
    result = await handler.handle({"body": raw})
    return JSONResponse(status_code=result.status_code, content=result.body)
