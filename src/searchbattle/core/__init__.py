"""Query coordination: races the two lookups for one request."""

from searchbattle.core.coordinator import InvalidQuery, QueryCoordinator

__all__ = ["InvalidQuery", "QueryCoordinator"]
