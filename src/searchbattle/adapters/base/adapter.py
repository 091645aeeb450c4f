"""Base lookup adapter — Abstract interface for the compared backends.

Every backend raced by the coordinator implements this interface.
The adapter is responsible for:
  1. Executing the free-text lookup against its backend
  2. Mapping raw rows/hits to ``Record``
  3. Reporting health status

Adapters receive their connection pool (SQLAlchemy engine, Elasticsearch
client) at construction time; they never create global clients themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from searchbattle.adapters.base.exceptions import BackendError, ConfigurationError
from searchbattle.models.outcome import LookupOutcome, Source
from searchbattle.models.record import Record

DEFAULT_PAGE_SIZE = 10


class AdapterHealth(BaseModel):
    """Health status of a lookup adapter."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


class RawResults(BaseModel):
    """Raw lookup results from a backend before mapping to records."""

    total_hits: int = Field(default=0, description="Total number of matches in the store")
    documents: list[dict[str, Any]] = Field(default_factory=list, description="Raw rows or index sources")
    took_ms: int = Field(default=0, description="Backend round-trip time in ms")


class LookupAdapter(ABC):
    """Abstract base class for lookup adapters.

    Subclasses implement:
      - source: which side of the comparison this adapter represents
      - execute(): run the backend query and return raw results
      - initialize() / shutdown(): connectivity check and pool disposal
      - health_check(): report backend health

    ``search()`` is the public entry point used by the coordinator. It
    wraps every failure in a ``BackendError`` tagged with ``source``.

    Args:
        page_size: Maximum number of records returned per lookup.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ConfigurationError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size

    @property
    @abstractmethod
    def source(self) -> Source:
        """Backend identity used to tag outcomes and errors."""

    @property
    def name(self) -> str:
        return self.source.value

    @abstractmethod
    async def initialize(self) -> None:
        """Verify the backend is reachable.

        Called once during application startup.
        """

    @abstractmethod
    async def shutdown(self) -> None:
        """Release the backend connection pool."""

    @abstractmethod
    async def execute(self, query: str) -> RawResults:
        """Run the free-text lookup against the backend.

        Args:
            query: The trimmed, non-empty query string.

        Returns:
            At most ``page_size`` raw documents plus the store-wide total.
        """

    @abstractmethod
    async def health_check(self) -> AdapterHealth:
        """Check the health of the backend."""

    def map_record(self, raw: dict[str, Any]) -> Record:
        """Map one raw row or document to a ``Record``."""
        return Record.from_mapping(raw)

    async def search(self, query: str) -> LookupOutcome:
        """Execute the lookup and build an immutable ``LookupOutcome``.

        Args:
            query: The trimmed, non-empty query string.

        Returns:
            The outcome with records capped at ``page_size``.

        Raises:
            BackendError: On any backend or mapping failure.
        """
        try:
            raw = await self.execute(query)
            records = tuple(self.map_record(doc) for doc in raw.documents[: self.page_size])
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(self.source, f"{type(e).__name__}: {e}", cause=e) from e

        return LookupOutcome(
            source=self.source,
            records=records,
            total_matched=max(raw.total_hits, len(records)),
            elapsed_ms=max(raw.took_ms, 0),
        )
