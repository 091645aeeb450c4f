"""Indexed-search lookup adapter (Elasticsearch)."""

from searchbattle.adapters.indexed.adapter import IndexedAdapter, build_query_string, create_search_client

__all__ = ["IndexedAdapter", "build_query_string", "create_search_client"]
