"""Health check endpoints — Service and backend health monitoring."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from searchbattle import __version__
from searchbattle.adapters.base.adapter import AdapterHealth
from searchbattle.api.deps import get_coordinator
from searchbattle.core.coordinator import QueryCoordinator

router = APIRouter()


class HealthResponse(BaseModel):
    """Service health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="Server version")
    service: str = Field(description="Service name ('searchbattle')")
    sources: list[str] = Field(description="Backends raced on every search")


class AdapterHealthResponse(BaseModel):
    """Per-backend health check response."""

    adapters: dict[str, AdapterHealth] = Field(description="Map of source name to its health status")


@router.get("/health", response_model=HealthResponse, summary="Service Health Check")
async def health_check(
    coordinator: QueryCoordinator = Depends(get_coordinator),
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="searchbattle",
        sources=[source.value for source in coordinator.adapters],
    )


@router.get(
    "/health/adapters",
    response_model=AdapterHealthResponse,
    summary="Backend Health Check",
    description="Ping the relational store and the search index and report latency and status for each.",
)
async def adapter_health(
    coordinator: QueryCoordinator = Depends(get_coordinator),
) -> AdapterHealthResponse:
    return AdapterHealthResponse(adapters=await coordinator.health_check_all())
