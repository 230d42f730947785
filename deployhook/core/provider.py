"""Source provider interface consumed by the deployment core."""

from typing import Callable, Protocol

from deployhook.models.deployment import PendingDeployment
from deployhook.models.environment import Environment, SourceProviderBinding


class SourceProviderClient(Protocol):
    """Operations the deployment core needs from a source provider.

    ``create_deployment`` raises ``GitHubAutoMergedError`` or
    ``GitHubDeploymentConflictError`` for the expected refusals and
    ``ProviderTransportError`` for everything else.
    """

    async def create_deployment(self, pending: PendingDeployment) -> None: ...

    async def commit_checks_successful(self, repository: str, hash: str) -> bool: ...

    async def latest_hash_for(self, repository: str, branch: str) -> str: ...


ClientFactory = Callable[[SourceProviderBinding], SourceProviderClient]


def provider_client(
    environment: Environment, client_factory: ClientFactory
) -> SourceProviderClient:
    """Client bound to the environment's provider installation."""
    return client_factory(environment.source_provider)
