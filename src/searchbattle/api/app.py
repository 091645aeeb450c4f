"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from searchbattle import __version__
from searchbattle.adapters.indexed.adapter import IndexedAdapter, create_search_client
from searchbattle.adapters.relational.adapter import RelationalAdapter, create_database_engine
from searchbattle.api.deps import set_coordinator
from searchbattle.api.router import router
from searchbattle.config.settings import Settings
from searchbattle.core.coordinator import InvalidQuery, QueryCoordinator
from searchbattle.observability.logging import setup_logging

logger = logging.getLogger(__name__)


def build_coordinator(settings: Settings) -> QueryCoordinator:
    """Create both connection pools and wire them into a coordinator.

    Pools are created once per process and shared by every request.
    """
    page_size = settings.search.page_size
    relational = RelationalAdapter(
        create_database_engine(settings.database),
        table=settings.database.table,
        page_size=page_size,
    )
    indexed = IndexedAdapter(
        create_search_client(settings.elasticsearch),
        index=settings.elasticsearch.index,
        page_size=page_size,
    )
    return QueryCoordinator(relational, indexed, timeout=settings.search.adapter_timeout)


def create_app(settings: Settings | None = None, coordinator: QueryCoordinator | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.
        coordinator: Pre-built coordinator. If None, one is built from
            ``settings`` at startup.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        # Auto-detect searchbattle-config.yaml if present
        yaml_path = Path("searchbattle-config.yaml")
        if yaml_path.exists():
            logger.info("Loading configuration from %s", yaml_path)
            settings = Settings.from_yaml(yaml_path)
        else:
            settings = Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        setup_logging(settings.observability)
        logger.info("Starting Search Battle v%s", __version__)

        active = coordinator if coordinator is not None else build_coordinator(settings)
        await active.initialize()
        set_coordinator(active)

        app.state.settings = settings
        app.state.coordinator = active

        logger.info("Search Battle is ready to serve requests on port %d", settings.server.port)
        yield

        logger.info("Shutting down Search Battle...")
        await active.shutdown()
        set_coordinator(None)
        logger.info("Search Battle shutdown complete")

    app = FastAPI(
        title="Search Battle",
        description=(
            "Race the same free-text query against a relational database and a search "
            "engine, and stream each result back as soon as it arrives."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidQuery)
    async def invalid_query_handler(request: Request, exc: InvalidQuery) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    app.include_router(router)

    return app
