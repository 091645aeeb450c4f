"""Search Battle Python SDK — Async and sync clients for the Search Battle API.

Usage::

    # Async
    async with AsyncSearchBattleClient("http://localhost:8080") as client:
        async for event in client.search("wombat"):
            print(event["source"], event["time"])

    # Sync (wraps async client internally)
    client = SearchBattleClient("http://localhost:8080")
    events = client.search("wombat")
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Coroutine
from typing import Any, TypeVar, cast

import httpx

_T = TypeVar("_T")

logger = logging.getLogger(__name__)

SearchEvent = dict[str, Any]
"""One decoded SSE payload: ``{source, data, time}`` or ``{source, error, time}``."""


# ═══════════════════════════════════════════════════════════════════════════════
# Async client
# ═══════════════════════════════════════════════════════════════════════════════


class AsyncSearchBattleClient:
    """Async Python client for the Search Battle API.

    Args:
        base_url: Server URL, e.g. ``"http://localhost:8080"``.
        timeout: Request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        timeout: float = 60.0,
        **httpx_kwargs: Any,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            **httpx_kwargs,
        )

    async def __aenter__(self) -> AsyncSearchBattleClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ── Health ──

    async def health(self) -> dict[str, Any]:
        resp = await self._client.get("/health")
        resp.raise_for_status()
        return cast(dict[str, Any], resp.json())

    async def adapter_health(self) -> dict[str, Any]:
        resp = await self._client.get("/health/adapters")
        resp.raise_for_status()
        return cast(dict[str, Any], resp.json())

    # ── Search ──

    async def search(self, query: str) -> AsyncIterator[SearchEvent]:
        """Race both backends and yield each event as it arrives.

        Args:
            query: Free-text query.

        Yields:
            Decoded event payloads, at most one per backend.

        Raises:
            httpx.HTTPStatusError: If the server rejects the query (e.g. 400).
        """
        async with self._client.stream("GET", "/search", params={"q": query}) as resp:
            if resp.is_error:
                await resp.aread()
                resp.raise_for_status()
            async for event in _parse_sse_stream(resp):
                yield event


# ═══════════════════════════════════════════════════════════════════════════════
# Sync client (wraps AsyncSearchBattleClient)
# ═══════════════════════════════════════════════════════════════════════════════


class SearchBattleClient:
    """Synchronous Python client for the Search Battle API.

    Wraps :class:`AsyncSearchBattleClient` using ``asyncio.run``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        timeout: float = 60.0,
        **httpx_kwargs: Any,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._httpx_kwargs = httpx_kwargs

    def _run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        """Run an async coroutine synchronously."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            import concurrent.futures

            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                return pool.submit(asyncio.run, coro).result()
        return asyncio.run(coro)

    def _make_client(self) -> AsyncSearchBattleClient:
        return AsyncSearchBattleClient(
            self._base_url,
            timeout=self._timeout,
            **self._httpx_kwargs,
        )

    def health(self) -> dict[str, Any]:
        async def _call() -> dict[str, Any]:
            async with self._make_client() as c:
                return await c.health()

        return self._run(_call())

    def adapter_health(self) -> dict[str, Any]:
        async def _call() -> dict[str, Any]:
            async with self._make_client() as c:
                return await c.adapter_health()

        return self._run(_call())

    def search(self, query: str) -> list[SearchEvent]:
        """Race both backends and return the events in arrival order."""

        async def _collect() -> list[SearchEvent]:
            async with self._make_client() as c:
                return [event async for event in c.search(query)]

        return self._run(_collect())


# ═══════════════════════════════════════════════════════════════════════════════
# SSE parser
# ═══════════════════════════════════════════════════════════════════════════════


async def _parse_sse_stream(response: httpx.Response) -> AsyncIterator[SearchEvent]:
    """Parse ``data:``-only SSE frames from an httpx response."""
    data_lines: list[str] = []

    async for line in response.aiter_lines():
        if line.startswith("data:"):
            data_lines.append(line[len("data:") :].strip())
        elif line == "" and data_lines:
            raw_data = "\n".join(data_lines)
            data_lines = []
            try:
                yield json.loads(raw_data)
            except json.JSONDecodeError:
                logger.warning("Ignoring malformed SSE frame: %s", raw_data[:200])

    if data_lines:
        logger.warning("Stream closed mid-frame; dropping %d data line(s)", len(data_lines))
