"""Search endpoint — stream both backends' results as Server-Sent Events.

The response carries one ``data:`` frame per backend, in the order the
backends answer, then the connection closes. A backend failure becomes an
error frame for that backend only; the other frame is still delivered.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from searchbattle.api.deps import get_coordinator
from searchbattle.api.transport import SSETransport, TransportError
from searchbattle.core.coordinator import QueryCoordinator
from searchbattle.models.outcome import SearchEvent
from searchbattle.observability.logging import bind_request_context

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/search",
    summary="Race both backends",
    description=(
        "Run the query against the relational store and the search index at the "
        "same time and stream each result as soon as it is ready.\n\n"
        "**Event payloads** (`text/event-stream`, one `data:` line per event):\n"
        "- outcome: `{source, data: {data: [record...], total}, time}`\n"
        "- error: `{source, error: {type, message}, time}`\n\n"
        "The stream closes after both backends have reported."
    ),
    response_class=StreamingResponse,
    responses={
        200: {"description": "SSE stream of per-backend events", "content": {"text/event-stream": {}}},
        400: {"description": "Missing or blank `q` parameter"},
    },
)
async def search(
    q: str | None = Query(default=None, description="Free-text query"),
    coordinator: QueryCoordinator = Depends(get_coordinator),
) -> StreamingResponse:
    # Raises InvalidQuery (-> 400) before any lookup starts.
    events = coordinator.handle(q)
    return StreamingResponse(
        _sse_generator(events, q or ""),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


async def _sse_generator(events: AsyncIterator[SearchEvent], query: str) -> AsyncIterator[str]:
    """Yield SSE frames as the coordinator produces events."""
    transport = SSETransport()
    pump = asyncio.ensure_future(_pump(events, transport, query))
    try:
        async for frame in transport:
            yield frame
    finally:
        # Client disconnected: stop accepting events and cancel in-flight lookups.
        transport.close()
        if not pump.done():
            pump.cancel()
        await asyncio.gather(pump, return_exceptions=True)


async def _pump(events: AsyncIterator[SearchEvent], transport: SSETransport, query: str) -> None:
    # The pump runs in its own task, so the binding ends with this request.
    bind_request_context(query=query.strip())
    try:
        async for event in events:
            transport.emit(event)
    except TransportError as e:
        logger.debug("Search stream abandoned by client: %s", e)
    except Exception:
        logger.error("Search stream failed", exc_info=True)
    finally:
        transport.close()
