"""Decoding and schema validation of inbound request bodies.

Validation never raises for a bad payload; it returns a
:class:`ValidationFailure` holding a flattened, field-indexed report of every
violation so the caller can show all of them at once.
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from promptgateway.gateway.errors import MalformedBodyError
from promptgateway.providers.models import Model, Provider


class IncomingRequest(BaseModel):
    """Validated prompt request.  Unknown keys are dropped."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    prompt: str = Field(min_length=1)
    threadID: str | None = None  # noqa: N815 – wire name
    provider: Provider | None = None
    model: Model | None = None

    @field_validator("threadID", "provider", "model", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # Optional fields may be omitted but not sent as null.
        if value is None:
            raise ValueError("Expected a value, received null")
        return value


@dataclass(frozen=True)
class ValidationFailure:
    """Every schema violation in one payload.

    ``details`` has the shape ``{"formErrors": [...], "fieldErrors": {...}}``:
    violations of the payload as a whole go to ``formErrors``; violations of a
    named field are listed under that field in ``fieldErrors``.
    """

    details: dict[str, Any]


def parse_body(body: Any) -> Any:
    """Decode a text body as JSON; return structured bodies unchanged.

    Raises:
        MalformedBodyError: *body* is text but not valid JSON.
    """
    if isinstance(body, str | bytes | bytearray):
        try:
            return json.loads(body)
        except ValueError as exc:
            raise MalformedBodyError(str(exc)) from exc
    return body


def flatten_errors(exc: PydanticValidationError) -> dict[str, Any]:
    form_errors: list[str] = []
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = error["loc"]
        if not loc:
            form_errors.append(error["msg"])
        else:
            field_errors.setdefault(str(loc[0]), []).append(error["msg"])
    return {"formErrors": form_errors, "fieldErrors": field_errors}


def validate_request(payload: Any) -> IncomingRequest | ValidationFailure:
    try:
        return IncomingRequest.model_validate(payload)
    except PydanticValidationError as exc:
        return ValidationFailure(details=flatten_errors(exc))
