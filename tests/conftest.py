"""Shared test fixtures and configuration."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Sequence
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from searchbattle.adapters.base.adapter import AdapterHealth, LookupAdapter, RawResults
from searchbattle.adapters.relational.adapter import RelationalAdapter
from searchbattle.config.settings import Settings
from searchbattle.models.outcome import Source
from searchbattle.models.record import Record
from searchbattle.seeding.loader import seed_relational


class FakeAdapter(LookupAdapter):
    """In-memory adapter with configurable latency and failure."""

    def __init__(
        self,
        source: Source,
        records: Sequence[Record] = (),
        *,
        total: int | None = None,
        delay: float = 0.0,
        error: BaseException | None = None,
        page_size: int = 10,
    ) -> None:
        super().__init__(page_size=page_size)
        self._source = source
        self.records = list(records)
        self.total = len(self.records) if total is None else total
        self.delay = delay
        self.error = error
        self.queries: list[str] = []
        self.finished = False
        self.cancelled = False
        self.initialized = False
        self.shut_down = False

    @property
    def source(self) -> Source:
        return self._source

    @property
    def calls(self) -> int:
        return len(self.queries)

    async def initialize(self) -> None:
        self.initialized = True

    async def shutdown(self) -> None:
        self.shut_down = True

    async def execute(self, query: str) -> RawResults:
        self.queries.append(query)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        self.finished = True
        return RawResults(
            total_hits=self.total,
            documents=[r.model_dump() for r in self.records],
            took_ms=1,
        )

    async def health_check(self) -> AdapterHealth:
        return AdapterHealth(status="healthy", latency_ms=1)


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        database={"url": "sqlite+aiosqlite:///:memory:"},
        search={"adapter_timeout": 2.0},
    )


@pytest.fixture
def wombat() -> Record:
    return Record(external_id=1, review="a rare wombat sighting", sentiment=0)


@pytest.fixture
def make_adapter() -> Callable[..., FakeAdapter]:
    """Factory for ``FakeAdapter`` instances."""
    return FakeAdapter


# ── SQLite-backed relational store ───────────────────────────────────────────


@pytest.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Async engine on a throwaway SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'corpus.db'}")
    yield engine
    await engine.dispose()


@pytest.fixture
def corpus() -> list[Record]:
    """25 movie reviews plus a few rows containing SQL and LIKE metacharacters."""
    records = [
        Record(external_id=i, review=f"Review {i}: this movie was {'great' if i % 2 else 'awful'}", sentiment=i % 2)
        for i in range(1, 26)
    ]
    records += [
        Record(external_id=100, review="Only 5% of viewers finished it", sentiment=0),
        Record(external_id=101, review="snake_case titles everywhere", sentiment=0),
        Record(external_id=102, review="The director's cut ' OR '1'='1 was strange", sentiment=1),
    ]
    return records


@pytest.fixture
async def seeded_engine(sqlite_engine: AsyncEngine, corpus: list[Record]) -> AsyncEngine:
    await seed_relational(sqlite_engine, corpus)
    return sqlite_engine


@pytest.fixture
def relational_adapter(seeded_engine: AsyncEngine) -> RelationalAdapter:
    return RelationalAdapter(seeded_engine, table="reviews")
