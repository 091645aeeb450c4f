"""Corpus loader — fill the relational table and the search index from one CSV.

The CSV is the pandas export used by the demo dataset::

    ,review,sentiment
    0,"One of the other reviewers has mentioned ...",1

The unnamed first column (``""`` or ``"0"``) becomes ``external_id`` in both
stores, which is what keeps the two backends views over one corpus.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Iterator
from itertools import islice
from pathlib import Path
from typing import Any

from sqlalchemy import MetaData, Table, insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine

from searchbattle.adapters.relational.schema import reviews_table
from searchbattle.models.record import Record

logger = logging.getLogger(__name__)

RELATIONAL_BATCH_SIZE = 100
INDEX_BATCH_SIZE = 500

INDEX_MAPPINGS: dict[str, Any] = {
    "properties": {
        "external_id": {"type": "integer"},
        "review": {"type": "text"},
        "sentiment": {"type": "keyword"},
    }
}


def read_corpus(path: str | Path) -> Iterator[Record]:
    """Stream records from the corpus CSV, skipping malformed rows."""
    with open(path, newline="", encoding="utf-8") as f:
        for line_no, row in enumerate(csv.DictReader(f), start=2):
            raw_id = row.get("") or row.get("0")
            try:
                yield Record(
                    external_id=int(raw_id),  # type: ignore[arg-type]
                    review=row["review"],
                    sentiment=int(row["sentiment"]),
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed corpus row at line %d", line_no)


def _batched(records: Iterable[Record], size: int) -> Iterator[list[Record]]:
    it = iter(records)
    while batch := list(islice(it, size)):
        yield batch


def _insert_ignoring_duplicates(dialect: str, table: Table) -> Any:
    """INSERT that skips rows whose ``external_id`` already exists."""
    if dialect == "postgresql":
        return postgresql.insert(table).on_conflict_do_nothing(index_elements=["external_id"])
    if dialect == "sqlite":
        return sqlite.insert(table).on_conflict_do_nothing(index_elements=["external_id"])
    return insert(table)


async def seed_relational(
    engine: AsyncEngine,
    records: Iterable[Record],
    table: str = "reviews",
    batch_size: int = RELATIONAL_BATCH_SIZE,
) -> int:
    """Create the reviews table if needed and insert ``records`` in batches.

    Returns:
        Number of records submitted (duplicates are skipped by the database).
    """
    metadata = MetaData()
    t = reviews_table(table, metadata)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Ensured %s table exists", t.name)

    stmt = _insert_ignoring_duplicates(engine.dialect.name, t)
    count = 0
    for batch in _batched(records, batch_size):
        async with engine.begin() as conn:
            await conn.execute(stmt, [record.model_dump() for record in batch])
        count += len(batch)
        logger.info("Inserted %d records into %s...", count, t.name)
    return count


async def seed_index(
    client: Any,
    records: Iterable[Record],
    index: str = "reviews",
    batch_size: int = INDEX_BATCH_SIZE,
    recreate: bool = True,
) -> int:
    """(Re)create the reviews index and bulk-index ``records``.

    Returns:
        Number of documents indexed successfully.
    """
    from elasticsearch.helpers import async_bulk

    exists = bool(await client.indices.exists(index=index))
    if exists and recreate:
        logger.info("Index %s already exists. Deleting...", index)
        await client.indices.delete(index=index)
        exists = False
    if not exists:
        await client.indices.create(index=index, mappings=INDEX_MAPPINGS)
        logger.info("Created index %s", index)

    actions = ({"_index": index, "_source": record.model_dump()} for record in records)
    indexed, errors = await async_bulk(client, actions, chunk_size=batch_size, raise_on_error=False)
    if errors:
        logger.error("Bulk indexing reported %d errors, first: %s", len(errors), errors[0])
    await client.indices.refresh(index=index)
    logger.info("Indexed %d records into %s", indexed, index)
    return indexed
