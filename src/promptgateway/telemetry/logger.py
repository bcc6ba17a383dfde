"""Best-effort writer of per-request telemetry records.

A failing sink must never change what the caller receives, so both entry
points swallow sink errors after logging them.
"""

import structlog

from promptgateway.telemetry.records import LogRecord, now_ms
from promptgateway.telemetry.sinks import LogSink

_log = structlog.get_logger(__name__)


class TelemetryLogger:
    def __init__(self, sink: LogSink) -> None:
        self._sink = sink

    async def record_success(self, record: LogRecord) -> None:
        await self._write(record, "success")

    async def record_failure(self, record: LogRecord) -> None:
        await self._write(record, "failure")

    async def _write(self, record: LogRecord, outcome: str) -> None:
        record.duration_ms = now_ms() - record.request_start_time
        entry = {**record.to_dict(), "outcome": outcome}
        try:
            await self._sink.append(entry)
        except Exception as exc:
            _log.error(
                "telemetry_sink_error",
                request_id=record.request_id,
                outcome=outcome,
                sink=type(self._sink).__name__,
                error_type=type(exc).__name__,
                error=str(exc),
            )
