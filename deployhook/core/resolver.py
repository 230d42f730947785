"""Resolve the environments affected by an event."""

from deployhook.core.repository import EnvironmentRepository
from deployhook.models.environment import Environment
from deployhook.models.events import PushEvent, StatusEvent


class EnvironmentResolver:
    """Finds the environments tracking the branches an event touched."""

    def __init__(self, repository: EnvironmentRepository):
        self._repository = repository

    async def environments_for(self, event: PushEvent | StatusEvent) -> list[Environment]:
        """Environments tracking any of the event's branches, in configuration order."""
        environments: dict[int, Environment] = {}
        for branch in event.branches:
            for environment in await self._repository.environments_tracking_branch(
                event.repository, branch
            ):
                environments.setdefault(environment.id, environment)

        return sorted(environments.values(), key=lambda e: e.id)
