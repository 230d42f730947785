"""Dependency injection for API endpoints."""

from typing import Annotated

from fastapi import Depends

from deployhook.config import Settings, get_settings
from deployhook.core.exceptions import EnvironmentNotFoundError
from deployhook.core.hooks import GitHubHookProcessor
from deployhook.core.repository import EnvironmentRepository, get_environment_repository
from deployhook.core.router import EventRouter
from deployhook.models.environment import Environment
from deployhook.services.github import client_for


async def get_repository() -> EnvironmentRepository:
    """Get the environment repository."""
    return get_environment_repository()


async def get_event_router(
    repository: Annotated[EnvironmentRepository, Depends(get_repository)],
) -> EventRouter:
    """Get the webhook event router."""
    return GitHubHookProcessor(repository, client_for).router()


async def get_environment_by_id(
    environment_id: int,
    repository: Annotated[EnvironmentRepository, Depends(get_repository)],
) -> Environment:
    """Get an environment by ID or raise 404."""
    environment = await repository.get_environment(environment_id)
    if not environment:
        raise EnvironmentNotFoundError(environment_id)
    return environment


# Type aliases for cleaner signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
RepositoryDep = Annotated[EnvironmentRepository, Depends(get_repository)]
EventRouterDep = Annotated[EventRouter, Depends(get_event_router)]
EnvironmentDep = Annotated[Environment, Depends(get_environment_by_id)]
