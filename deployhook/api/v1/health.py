"""Health check endpoint.

Reports whether the service can actually act on webhooks: the environment
store has to be reachable and a webhook secret configured, otherwise every
delivery is either lost or rejected.
"""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from deployhook import __version__
from deployhook.api.deps import RepositoryDep, SettingsDep

router = APIRouter()


class HealthChecks(BaseModel):
    """Individual readiness checks."""

    store: bool
    webhook_secret: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str
    checks: HealthChecks
    timestamp: datetime


@router.get("/health", response_model=HealthResponse)
async def health_check(repository: RepositoryDep, settings: SettingsDep) -> HealthResponse:
    """Check the store and webhook configuration."""
    checks = HealthChecks(
        store=await repository.ping(),
        webhook_secret=bool(settings.github_webhook_secret),
    )
    healthy = checks.store and checks.webhook_secret

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        environment=settings.app_env,
        checks=checks,
        timestamp=datetime.utcnow(),
    )
