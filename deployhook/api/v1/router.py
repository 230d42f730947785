"""Main router for API v1."""

from fastapi import APIRouter

from deployhook.api.v1 import environments, health, hooks

router = APIRouter(prefix="/v1")

router.include_router(health.router, tags=["health"])
router.include_router(hooks.router, prefix="/hooks", tags=["hooks"])
router.include_router(environments.router, prefix="/environments", tags=["environments"])
