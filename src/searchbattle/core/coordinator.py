"""Query Coordinator — races the relational and indexed lookups.

The coordinator manages one request's lifecycle:
  1. Validation: reject blank queries before any backend is touched
  2. Dispatch: start both adapter calls as independent asyncio tasks
  3. Delivery: yield each adapter's event the moment it completes
  4. Termination: stop after both adapters have reported

A failing or timed-out adapter produces a ``LookupFailure`` for its own
source; the other adapter keeps running and its outcome is still yielded.
If the consumer stops iterating early, pending lookups are cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator

from pydantic import ValidationError

from searchbattle.adapters.base.adapter import AdapterHealth, LookupAdapter
from searchbattle.adapters.base.exceptions import BackendError
from searchbattle.models.outcome import LookupFailure, SearchEvent, Source
from searchbattle.models.query import SearchRequest
logger = logging.getLogger(__name__)


class InvalidQuery(ValueError):
    """Raised when the submitted query is missing or blank."""


class QueryCoordinator:
    """Fan a single query out to both lookup adapters.

    Args:
        relational: Adapter for the relational store.
        indexed: Adapter for the search index.
        timeout: Per-adapter timeout in seconds. ``None`` or ``0`` disables it.
    """

    def __init__(
        self,
        relational: LookupAdapter,
        indexed: LookupAdapter,
        *,
        timeout: float | None = None,
    ) -> None:
        self.relational = relational
        self.indexed = indexed
        self.timeout = timeout or None

    @property
    def adapters(self) -> dict[Source, LookupAdapter]:
        return {self.relational.source: self.relational, self.indexed.source: self.indexed}

    async def initialize(self) -> None:
        """Verify both backends; an unreachable backend is logged, not fatal."""
        for adapter in self.adapters.values():
            try:
                await adapter.initialize()
            except BackendError as e:
                logger.warning("Backend unavailable at startup: %s", e)

    async def shutdown(self) -> None:
        for source, adapter in self.adapters.items():
            try:
                await adapter.shutdown()
                logger.info("Shut down adapter: %s", source.value)
            except Exception:
                logger.warning("Error shutting down adapter: %s", source.value, exc_info=True)

    async def health_check_all(self) -> dict[str, AdapterHealth]:
        """Run health checks on both adapters."""
        results: dict[str, AdapterHealth] = {}
        for source, adapter in self.adapters.items():
            try:
                results[source.value] = await adapter.health_check()
            except Exception as e:
                results[source.value] = AdapterHealth(status="unhealthy", message=str(e))
        return results

    # ──────────────────────────────────────────────────────────────────────
    # Request handling
    # ──────────────────────────────────────────────────────────────────────

    @staticmethod
    def prepare(query: str | None) -> SearchRequest:
        """Validate a raw query string.

        Raises:
            InvalidQuery: If ``query`` is missing, empty, or whitespace only.
        """
        if query is None:
            raise InvalidQuery('Query parameter "q" is required')
        try:
            return SearchRequest(query=query)
        except ValidationError as e:
            raise InvalidQuery('Query parameter "q" is required') from e

    def handle(self, query: str | None) -> AsyncIterator[SearchEvent]:
        """Validate ``query`` and return the stream of lookup events.

        Validation happens eagerly, so an invalid query raises here and
        no adapter is ever started.

        Returns:
            An async iterator yielding at most one event per adapter, in
            completion order.

        Raises:
            InvalidQuery: If the query is blank.
        """
        request = self.prepare(query)
        return self.race(request)

    async def race(self, request: SearchRequest) -> AsyncIterator[SearchEvent]:
        """Run both lookups concurrently and yield events as they finish."""
        logger.info("Dispatching lookups for '%s'", request.query)

        pending = [
            asyncio.ensure_future(self._run_adapter(adapter, request.query))
            for adapter in (self.relational, self.indexed)
        ]
        try:
            for completed in asyncio.as_completed(pending):
                event = await completed
                logger.info("Lookup %s: %s in %d ms", event.source.value, event.kind, event.elapsed_ms)
                yield event
        finally:
            # Consumer went away before both lookups finished.
            for task in pending:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run_adapter(self, adapter: LookupAdapter, query: str) -> SearchEvent:
        """Run one adapter and turn every failure into a ``LookupFailure``."""
        start = time.monotonic()
        try:
            if self.timeout is None:
                return await adapter.search(query)
            return await asyncio.wait_for(adapter.search(query), timeout=self.timeout)
        except TimeoutError:
            logger.warning("%s lookup timed out after %gs", adapter.source.value, self.timeout)
            return LookupFailure(
                source=adapter.source,
                error_type="timeout",
                message=f"No response within {self.timeout:g}s",
                elapsed_ms=_elapsed_ms(start),
            )
        except BackendError as e:
            logger.warning("Lookup failed: %s", e)
            return LookupFailure(
                source=adapter.source,
                error_type="backend_error",
                message=str(e.args[0]),
                elapsed_ms=_elapsed_ms(start),
            )
        except Exception as e:
            logger.error("Unexpected %s lookup failure", adapter.source.value, exc_info=True)
            return LookupFailure(
                source=adapter.source,
                error_type=type(e).__name__,
                message=str(e),
                elapsed_ms=_elapsed_ms(start),
            )


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
