"""Relational lookup adapter (SQLAlchemy async)."""

from searchbattle.adapters.relational.adapter import RelationalAdapter, create_database_engine
from searchbattle.adapters.relational.schema import reviews_table

__all__ = ["RelationalAdapter", "create_database_engine", "reviews_table"]
