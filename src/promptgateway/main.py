import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import make_asgi_app

from promptgateway.api.health import router as health_router
from promptgateway.api.prompt import router as prompt_router
from promptgateway.config import settings
from promptgateway.gateway import GatewayHandler
from promptgateway.observability import configure_logging, configure_tracing
from promptgateway.telemetry import DatabaseLogSink, build_sink

configure_logging(settings.log_level)
tracer_provider = configure_tracing(settings)

log = structlog.get_logger()

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Prompt Gateway",
    version=settings.app_version,
    description=(
        "Single prompt endpoint routed to OpenAI, Anthropic or Gemini, "
        "with a structured telemetry record for every request."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus metrics endpoint mounted as a sub-application
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# Routers
app.include_router(health_router)
app.include_router(prompt_router)

# Instrument *after* routes are registered
FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)


# ---------------------------------------------------------------------------
# Lifecycle events
# ---------------------------------------------------------------------------
@app.on_event("startup")
async def _startup() -> None:
    # The handler holds no per-request state; one instance serves every request.
    app.state.sink = build_sink(settings)
    app.state.handler = GatewayHandler.from_settings(settings, sink=app.state.sink)

    log.info(
        "Prompt Gateway ready",
        host=settings.host,
        port=settings.port,
        llm_timeout=settings.llm_timeout,
        log_sink=settings.log_sink,
        otel_endpoint=settings.otel_exporter_otlp_endpoint,
    )


@app.on_event("shutdown")
async def _shutdown() -> None:
    log.info("Prompt Gateway shutting down")
    sink = getattr(app.state, "sink", None)
    if isinstance(sink, DatabaseLogSink):
        await sink.dispose()
    tracer_provider.shutdown()
