"""Event transport — Server-Sent Events channel for one search response.

Each ``emit()`` produces exactly one self-contained SSE frame::

    data: {"source": "relational", "data": {"data": [...], "total": 42}, "time": 12}

Frames are queued for the response body immediately; nothing waits for the
other adapter. ``close()`` is the terminal signal: iteration stops once the
frames already emitted are drained. No sentinel event is written; the
connection closing is what tells the client the search is over.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator

from searchbattle.models.outcome import SearchEvent


class TransportError(RuntimeError):
    """Raised when writing to a channel that is already closed."""


def format_sse(event: SearchEvent) -> str:
    """Serialize one event as an SSE ``data:`` frame."""
    payload = json.dumps(event.to_wire(), ensure_ascii=False)
    return f"data: {payload}\n\n"


class SSETransport:
    """One-way channel from the coordinator to the HTTP response body."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event: SearchEvent) -> None:
        """Queue one event frame for immediate delivery.

        Raises:
            TransportError: If the channel has been closed.
        """
        if self._closed:
            raise TransportError(f"Channel closed; dropping {event.source.value} event")
        self._queue.put_nowait(format_sse(event))

    def close(self) -> None:
        """Signal that no further events will be emitted. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def __aiter__(self) -> AsyncIterator[str]:
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame
