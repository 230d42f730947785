"""Environment management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from deployhook.api.deps import EnvironmentDep, RepositoryDep
from deployhook.models.deployment import Deployment
from deployhook.models.environment import Environment, EnvironmentCreate

router = APIRouter()


@router.post(
    "",
    response_model=Environment,
    status_code=status.HTTP_201_CREATED,
    summary="Create an environment",
)
async def create_environment(
    data: EnvironmentCreate, repository: RepositoryDep
) -> Environment:
    """Bind a new environment to a repository branch."""
    return await repository.create_environment(data)


@router.get(
    "",
    response_model=list[Environment],
    summary="List all environments",
)
async def list_environments(repository: RepositoryDep) -> list[Environment]:
    return await repository.list_environments()


@router.get(
    "/{environment_id}",
    response_model=Environment,
    summary="Get a single environment",
)
async def get_environment(environment: EnvironmentDep) -> Environment:
    return environment


@router.delete(
    "/{environment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an environment",
)
async def delete_environment(environment: EnvironmentDep, repository: RepositoryDep) -> None:
    """Delete an environment together with its deployment history."""
    await repository.delete_environment(environment.id)


@router.get(
    "/{environment_id}/deployments",
    response_model=list[Deployment],
    summary="List confirmed deployments",
)
async def list_deployments(
    environment: EnvironmentDep,
    repository: RepositoryDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[Deployment]:
    """Deployments confirmed for the environment, newest first."""
    return await repository.list_deployments(environment.id, limit=limit, offset=offset)
