"""Master API router: mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from metapattern.api import health, metadata, pattern

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(metadata.router)
api_router.include_router(pattern.router)
