"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from searchbattle.core.coordinator import QueryCoordinator

# Global coordinator instance (set during application lifespan)
_coordinator: QueryCoordinator | None = None


def set_coordinator(coordinator: QueryCoordinator | None) -> None:
    """Set the global coordinator instance (called during app lifespan)."""
    global _coordinator
    _coordinator = coordinator


def get_coordinator() -> QueryCoordinator:
    """Get the global query coordinator.

    Raises:
        RuntimeError: If the coordinator is not initialized.
    """
    if _coordinator is None:
        raise RuntimeError("Query coordinator not initialized. Is the server running?")
    return _coordinator
