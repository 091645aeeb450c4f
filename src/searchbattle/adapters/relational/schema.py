"""Table definition for the relational copy of the corpus."""

from __future__ import annotations

import re

from sqlalchemy import Column, Integer, MetaData, Table, Text

from searchbattle.adapters.base.exceptions import ConfigurationError

# Table names are interpolated into DDL/DML by SQLAlchemy; only plain identifiers are accepted.
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def validate_identifier(name: str) -> str:
    """Return ``name`` if it is a plain SQL identifier, else raise ``ConfigurationError``."""
    if not _IDENTIFIER_RE.match(name or ""):
        raise ConfigurationError(f"Invalid table name: {name!r}")
    return name


def reviews_table(name: str = "reviews", metadata: MetaData | None = None) -> Table:
    """Build the ``reviews`` table under the given name."""
    return Table(
        validate_identifier(name),
        metadata if metadata is not None else MetaData(),
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("external_id", Integer, unique=True),
        Column("review", Text, nullable=False),
        Column("sentiment", Integer, nullable=False),
    )
