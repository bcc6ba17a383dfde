from promptgateway.config import Settings
from promptgateway.telemetry.logger import TelemetryLogger
from promptgateway.telemetry.records import LogRecord
from promptgateway.telemetry.sinks import DatabaseLogSink, LogSink, StructlogSink


def build_sink(settings: Settings) -> LogSink:
    if settings.log_sink == "database":
        return DatabaseLogSink.from_url(settings.database_url)
    return StructlogSink()


__all__ = [
    "DatabaseLogSink",
    "LogRecord",
    "LogSink",
    "StructlogSink",
    "TelemetryLogger",
    "build_sink",
]
