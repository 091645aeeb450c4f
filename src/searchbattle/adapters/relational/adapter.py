"""Relational adapter — case-insensitive substring lookup over a SQL table.

Runs one statement per query::

    SELECT external_id, review, sentiment, count(*) OVER () AS total_count
    FROM reviews
    WHERE review ILIKE :pattern ESCAPE '\\'
    LIMIT :page_size

The window count returns the store-wide total alongside the capped page, so
page and total always come from the same scan. On PostgreSQL SQLAlchemy
renders ``ILIKE``; other dialects get ``lower(review) LIKE lower(:pattern)``.

The query is always a bound parameter. LIKE wildcards in user input are
escaped so the query matches as a literal substring.
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from searchbattle.adapters.base.adapter import DEFAULT_PAGE_SIZE, AdapterHealth, LookupAdapter, RawResults
from searchbattle.adapters.base.exceptions import BackendError
from searchbattle.adapters.relational.schema import reviews_table
from searchbattle.models.outcome import Source

if TYPE_CHECKING:
    from searchbattle.config.settings import DatabaseSettings

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def create_database_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create the process-wide async engine (and its connection pool)."""
    kwargs: dict[str, Any] = {"echo": settings.echo, "pool_pre_ping": True}
    if not settings.url.startswith("sqlite"):
        kwargs["pool_size"] = settings.pool_size
        kwargs["max_overflow"] = settings.max_overflow
        kwargs["pool_recycle"] = 3600
    if "asyncpg" in settings.url:
        kwargs["connect_args"] = {"command_timeout": settings.command_timeout}
    return create_async_engine(settings.url, **kwargs)


class RelationalAdapter(LookupAdapter):
    """Lookup adapter for a SQL table of reviews.

    Args:
        engine: Shared ``AsyncEngine``; owns the connection pool.
        table: Name of the reviews table.
        page_size: Maximum number of records per lookup.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        table: str = "reviews",
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        super().__init__(page_size=page_size)
        self._engine = engine
        self._table = reviews_table(table)

    @property
    def source(self) -> Source:
        return Source.RELATIONAL

    async def initialize(self) -> None:
        """Open one connection to verify the database is reachable."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            raise BackendError(self.source, f"Failed to connect to database: {e}", cause=e) from e
        logger.info("Connected to database (%s), table '%s'", self._engine.dialect.name, self._table.name)

    async def shutdown(self) -> None:
        """Dispose of the connection pool."""
        await self._engine.dispose()

    # ── Lookup ───────────────────────────────────────────────────────────

    def build_statement(self, query: str) -> Any:
        """Build the page+total statement for ``query``."""
        t = self._table
        pattern = f"%{escape_like(query)}%"
        return (
            select(
                t.c.external_id,
                t.c.review,
                t.c.sentiment,
                func.count().over().label("total_count"),
            )
            .where(t.c.review.ilike(pattern, escape=LIKE_ESCAPE))
            .limit(self.page_size)
        )

    async def execute(self, query: str) -> RawResults:
        stmt = self.build_statement(query)

        start = time.monotonic()
        async with self._engine.connect() as conn:
            result = await conn.execute(stmt)
            rows = [dict(row) for row in result.mappings().all()]
        took_ms = int((time.monotonic() - start) * 1000)

        total = int(rows[0]["total_count"]) if rows else 0
        for row in rows:
            row.pop("total_count", None)

        logger.debug("Relational lookup '%s': %d/%d rows in %d ms", query, len(rows), total, took_ms)
        return RawResults(total_hits=total, documents=rows, took_ms=took_ms)

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        try:
            start = time.monotonic()
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            latency_ms = int((time.monotonic() - start) * 1000)
            return AdapterHealth(
                status="healthy",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Dialect: {self._engine.dialect.name}, table: {self._table.name}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))
