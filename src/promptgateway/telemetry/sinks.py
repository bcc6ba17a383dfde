"""Append-only destinations for telemetry entries.

An entry is the dict form of a :class:`~promptgateway.telemetry.records.LogRecord`
plus an ``outcome`` key of ``"success"`` or ``"failure"``.
"""

from typing import Any, Protocol

import structlog
from sqlalchemy import (
    BigInteger,
    Column,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    insert,
)
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool


class LogSink(Protocol):
    async def append(self, entry: dict[str, Any]) -> None: ...


class StructlogSink:
    """Emits each entry as a structured log event on the process log stream."""

    def __init__(self, logger: Any = None) -> None:
        self._log = logger or structlog.get_logger("promptgateway.requests")

    async def append(self, entry: dict[str, Any]) -> None:
        if entry["outcome"] == "success":
            self._log.info("request_succeeded", **entry)
        else:
            self._log.warning("request_failed", **entry)


metadata = MetaData()

request_logs = Table(
    "request_logs",
    metadata,
    Column("request_id", String(36), primary_key=True),
    Column("outcome", String(16), nullable=False),
    Column("request_start_time", BigInteger, nullable=False),
    Column("duration_ms", Integer),
    Column("provider", String(32)),
    Column("model", String(64)),
    Column("tokens_used", Integer, nullable=False),
    Column("cost", Float, nullable=False),
    Column("raw_request", Text, nullable=False),
    Column("raw_response", Text),
    Column("error_message", Text),
)


class DatabaseLogSink:
    """Inserts one ``request_logs`` row per entry.

    The table is created on the first write.  Connections are not pooled so
    the sink works across event loops (one per Lambda invocation).
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._table_ready = False

    @classmethod
    def from_url(cls, database_url: str) -> "DatabaseLogSink":
        return cls(create_async_engine(database_url, poolclass=NullPool))

    async def append(self, entry: dict[str, Any]) -> None:
        row = {column.name: entry.get(column.name) for column in request_logs.columns}
        async with self._engine.begin() as conn:
            if not self._table_ready:
                await conn.run_sync(metadata.create_all)
                self._table_ready = True
            await conn.execute(insert(request_logs).values(**row))

    async def dispose(self) -> None:
        await self._engine.dispose()
