"""One review from the shared corpus.

Both backends are loaded from the same CSV at setup time, so a record
fetched from either store for the same ``external_id`` is identical.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """A single corpus entry as returned by both lookup adapters."""

    model_config = ConfigDict(frozen=True)

    external_id: int = Field(description="Stable corpus identifier, unique across both stores")
    review: str = Field(description="Free-text body matched against the query")
    sentiment: int = Field(description="Sentiment class of the review (0 = negative, 1 = positive)")

    @classmethod
    def from_mapping(cls, row: Any) -> Record:
        """Build a record from a DB row mapping or an index ``_source`` dict.

        Extra keys (e.g. the relational surrogate ``id``) are ignored.
        """
        return cls(
            external_id=int(row["external_id"]),
            review=str(row["review"]),
            sentiment=int(row["sentiment"]),
        )
