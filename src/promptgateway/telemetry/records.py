import json
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any


def now_ms() -> int:
    return int(time.time() * 1000)


def _jsonable(value: Any) -> str:
    if isinstance(value, bytes | bytearray):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


@dataclass
class LogRecord:
    """Telemetry for one gateway invocation.

    Created when the request arrives and filled in as the request progresses.
    ``raw_response`` is only set on success and ``error_message`` only on
    failure.  ``raw_request`` stays empty when the event cannot be serialised.
    """

    raw_request: str = ""
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    request_start_time: int = field(default_factory=now_ms)
    provider: str | None = None
    model: str | None = None
    tokens_used: int = 0
    cost: float = 0.0
    raw_response: str | None = None
    error_message: str | None = None
    duration_ms: int | None = None

    def capture_request(self, event: Any) -> None:
        """Store *event* as JSON.

        Raises:
            ValueError: *event* contains a circular reference.
            TypeError: *event* has keys JSON cannot represent.
        """
        self.raw_request = json.dumps(event, default=_jsonable)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
