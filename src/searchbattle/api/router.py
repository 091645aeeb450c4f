"""API router combining the search and health endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from searchbattle.api.endpoints.health import router as health_router
from searchbattle.api.endpoints.search import router as search_router

router = APIRouter()
router.include_router(search_router)
router.include_router(health_router)
