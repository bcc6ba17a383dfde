"""Request orchestration: validate, select a provider, invoke, log, respond.

:class:`GatewayHandler` is the only place failures are recovered.  Every
invocation ends in exactly one telemetry write and one
:class:`GatewayResponse`, whatever goes wrong along the way.
"""

import json
import random
import time
from dataclasses import dataclass
from typing import Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import StatusCode
from prometheus_client import Counter, Histogram

from promptgateway.config import Settings
from promptgateway.gateway.errors import MissingPromptError
from promptgateway.gateway.selector import ProviderSelector
from promptgateway.gateway.validation import (
    IncomingRequest,
    ValidationFailure,
    parse_body,
    validate_request,
)
from promptgateway.providers import LLMInvoker
from promptgateway.telemetry import LogRecord, LogSink, TelemetryLogger, build_sink

_log = structlog.get_logger(__name__)
_tracer = trace.get_tracer(__name__)

REQUESTS_TOTAL = Counter(
    "gateway_requests_total",
    "Gateway invocations by resolved provider and response status.",
    ["provider", "status_code"],
)
REQUEST_DURATION = Histogram(
    "gateway_request_duration_seconds",
    "Wall-clock time spent handling one gateway invocation.",
)

INVALID_BODY_LOG_MESSAGE = "Invalid Request Body"
MISSING_PROMPT_LOG_MESSAGE = "No prompt provided in the request body"
UNKNOWN_ERROR_MESSAGE = "Unknown Error"


@dataclass(frozen=True)
class GatewayResponse:
    status_code: int
    body: dict[str, Any]

    def to_event(self) -> dict[str, Any]:
        """Lambda proxy form: status plus a JSON-encoded body."""
        return {"statusCode": self.status_code, "body": json.dumps(self.body)}


def _require_prompt(request: IncomingRequest) -> str:
    # Unreachable while the schema enforces min_length=1.
    if not request.prompt:
        raise MissingPromptError(MISSING_PROMPT_LOG_MESSAGE)
    return request.prompt


class GatewayHandler:
    """Handles one prompt invocation end to end.

    Holds no per-request state, so a single instance can serve concurrent
    invocations.

    Args:
        invoker: Dispatches the prompt to the selected backend.
        selector: Picks a provider when the caller does not name one.
        telemetry: Receives exactly one record per invocation.
    """

    def __init__(
        self,
        invoker: LLMInvoker,
        selector: ProviderSelector,
        telemetry: TelemetryLogger,
    ) -> None:
        self._invoker = invoker
        self._selector = selector
        self._telemetry = telemetry

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        sink: LogSink | None = None,
        rng: random.Random | None = None,
    ) -> "GatewayHandler":
        return cls(
            invoker=LLMInvoker.from_settings(settings),
            selector=ProviderSelector(rng),
            telemetry=TelemetryLogger(sink or build_sink(settings)),
        )

    async def handle(self, event: Any) -> GatewayResponse:
        record = LogRecord()
        start_time = time.monotonic()

        with _tracer.start_as_current_span("gateway.handle") as span:
            span.set_attribute("gateway.request_id", record.request_id)
            response = await self._handle(event, record)
            span.set_attribute("http.response.status_code", response.status_code)
            if record.provider:
                span.set_attribute("gen_ai.system", record.provider)
            if response.status_code >= 500:
                span.set_status(StatusCode.ERROR, record.error_message or "")

        REQUESTS_TOTAL.labels(
            provider=record.provider or "none",
            status_code=str(response.status_code),
        ).inc()
        REQUEST_DURATION.observe(time.monotonic() - start_time)
        return response

    async def _handle(self, event: Any, record: LogRecord) -> GatewayResponse:
        log = _log.bind(request_id=record.request_id)

        try:
            record.capture_request(event)
            payload = parse_body(event.get("body"))
            outcome = validate_request(payload)

            if isinstance(outcome, ValidationFailure):
                log.info("gateway_request_invalid", details=outcome.details)
                record.error_message = INVALID_BODY_LOG_MESSAGE
                await self._telemetry.record_failure(record)
                return GatewayResponse(
                    400,
                    {"error": "Invalid request body.", "details": outcome.details},
                )

            record.provider = str(outcome.provider) if outcome.provider else None
            record.model = str(outcome.model) if outcome.model else None

            try:
                prompt = _require_prompt(outcome)
            except MissingPromptError as exc:
                log.info("gateway_request_invalid", error=str(exc))
                record.error_message = str(exc)
                await self._telemetry.record_failure(record)
                return GatewayResponse(400, {"message": f"{MISSING_PROMPT_LOG_MESSAGE}."})

            provider = self._selector.select(outcome.provider)
            model = str(outcome.model) if outcome.model else None
            record.provider = provider.value
            record.model = model or self._invoker.default_model(provider)
            log = log.bind(provider=record.provider, model=record.model)
            log.info("gateway_request_start", provider_requested=outcome.provider is not None)

            response = await self._invoker.invoke([], prompt, provider, model)

            record.raw_response = json.dumps(response.to_dict())
            record.tokens_used = response.total_tokens
            record.cost = response.cost or 0.0
            body = {"provider": provider.value, "response": response.to_dict()}

        except Exception as exc:
            message = str(exc) or UNKNOWN_ERROR_MESSAGE
            log.exception(
                "gateway_request_error",
                error_type=type(exc).__name__,
                error=message,
            )
            record.error_message = message
            await self._telemetry.record_failure(record)
            return GatewayResponse(500, {"error": message})

        await self._telemetry.record_success(record)
        log.info(
            "gateway_request_complete",
            tokens_used=record.tokens_used,
            cost=record.cost,
        )
        return GatewayResponse(200, body)
