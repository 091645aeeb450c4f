"""Search request model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchRequest(BaseModel):
    """A validated, single-use search request.

    Created by the coordinator when a caller submits a query; lives only
    for the duration of one streamed response.
    """

    model_config = ConfigDict(frozen=True)

    query: str = Field(description="Free-text query, trimmed", min_length=1)

    @field_validator("query", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v
