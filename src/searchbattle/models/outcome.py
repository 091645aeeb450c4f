"""Lookup events — the tagged union streamed back to the caller.

Each adapter produces exactly one event per request:

- ``LookupOutcome`` when the backend answered.
- ``LookupFailure`` when the backend raised, timed out, or misbehaved.

Both carry ``source`` so consumers can tell which side of the comparison
they are looking at, and ``kind`` so they can tell success from failure
without probing for keys.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from searchbattle.models.record import Record


class Source(str, Enum):
    """Identity of the backend that produced an event."""

    RELATIONAL = "relational"
    INDEXED = "indexed"


class LookupOutcome(BaseModel):
    """Successful result of one adapter call."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["outcome"] = "outcome"
    source: Source = Field(description="Adapter that produced this outcome")
    records: tuple[Record, ...] = Field(default=(), description="Matched records in backend order, capped at the page size")
    total_matched: int = Field(default=0, ge=0, description="Total matches in the backing store")
    elapsed_ms: int = Field(default=0, ge=0, description="Backend round-trip time in ms")

    def to_wire(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "data": {
                "data": [record.model_dump() for record in self.records],
                "total": self.total_matched,
            },
            "time": self.elapsed_ms,
        }


class LookupFailure(BaseModel):
    """Failed adapter call, reported in place of its outcome."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    source: Source = Field(description="Adapter that failed")
    error_type: str = Field(description="Short failure category, e.g. 'timeout' or 'backend_error'")
    message: str = Field(default="", description="Human-readable failure description")
    elapsed_ms: int = Field(default=0, ge=0, description="Time spent before the failure in ms")

    def to_wire(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "error": {"type": self.error_type, "message": self.message},
            "time": self.elapsed_ms,
        }


SearchEvent = LookupOutcome | LookupFailure
"""One streamed event: an outcome or a failure, discriminated by ``kind``."""
