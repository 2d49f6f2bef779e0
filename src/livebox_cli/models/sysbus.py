"""Models for the sysbus request/response envelope."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

JsonValue = Any
ErrorDescriptor = dict[str, Any]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class Session:
    """Authenticated context handed back to the invoker on every call."""

    context_id: str
    established_at: datetime = field(default_factory=_utcnow)
    invalidated: bool = False


class RequestEnvelope(BaseModel):
    """Body of one sysbus call."""

    model_config = ConfigDict(frozen=True)

    service: str = Field(min_length=1)
    method: str = Field(min_length=1)
    parameters: dict[str, JsonValue] = Field(default_factory=dict)


class ResponseEnvelope(BaseModel):
    """Decoded sysbus response; ``data`` on success, ``errors`` on failure."""

    status: bool
    data: JsonValue = None
    errors: list[ErrorDescriptor] | None = None

    @model_validator(mode="after")
    def validate_payload(self) -> ResponseEnvelope:
        if self.status and self.errors is not None:
            raise ValueError("A successful response cannot carry errors")
        if not self.status:
            if self.errors is None:
                raise ValueError("A failed response must carry errors")
            if self.data is not None:
                raise ValueError("A failed response cannot carry data")
        return self

    def as_document(self) -> dict[str, JsonValue]:
        """JSON document shape used for printing and filtering."""

        if self.status:
            return {"status": True, "data": self.data}
        return {
            "status": False,
            "errors": list(self.errors or []),
        }
