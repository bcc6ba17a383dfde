import asyncio
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from opentelemetry import trace
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.sql import text

from promptgateway.config import settings

router = APIRouter(prefix="/health", tags=["health"])
log = structlog.get_logger()
tracer = trace.get_tracer(__name__)


@router.get("")
async def health() -> JSONResponse:
    return JSONResponse(
        content={
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": settings.app_version,
        }
    )


@router.get("/live")
async def liveness() -> JSONResponse:
    """Kubernetes liveness probe: always returns 200 if the process is running."""
    return JSONResponse(content={"status": "alive"})


@router.get("/ready")
async def readiness() -> JSONResponse:
    """Kubernetes readiness probe: checks the telemetry database when it is the log sink."""
    checks: dict[str, str] = {}
    errors: dict[str, str] = {}

    with tracer.start_as_current_span("health.readiness"):
        if settings.log_sink == "database":
            with tracer.start_as_current_span("health.check.database"):
                engine = create_async_engine(settings.database_url, pool_pre_ping=False)
                try:
                    async with engine.connect() as conn:
                        await asyncio.wait_for(conn.execute(text("SELECT 1")), timeout=5.0)
                    checks["database"] = "ok"
                    log.debug("Database check succeeded")
                except Exception as exc:
                    errors["database"] = str(exc)
                    log.warning("Database check failed", error=str(exc))
                finally:
                    await engine.dispose()

    if errors:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "checks": checks, "errors": errors},
        )

    return JSONResponse(content={"status": "ready", "checks": checks})
