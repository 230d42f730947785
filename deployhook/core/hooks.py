"""GitHub webhook handlers."""

from typing import Any

from deployhook.core.confirmer import DeploymentConfirmer
from deployhook.core.gate import StatusGate
from deployhook.core.intents import build_pending_deployment
from deployhook.core.provider import ClientFactory
from deployhook.core.repository import EnvironmentRepository
from deployhook.core.resolver import EnvironmentResolver
from deployhook.core.router import EventRouter
from deployhook.core.trigger import DeployTrigger
from deployhook.models.deployment import TriggerOutcome
from deployhook.models.environment import Environment
from deployhook.models.events import DeploymentEvent, PushEvent, StatusEvent
from deployhook.utils.logging import get_logger

logger = get_logger(__name__)


class GitHubHookProcessor:
    """Handles push, status and deployment events.

    Every environment affected by an event is processed on its own: any
    failure while gating or deploying one environment is logged and the
    remaining environments are still processed.
    """

    def __init__(self, repository: EnvironmentRepository, client_factory: ClientFactory):
        self.resolver = EnvironmentResolver(repository)
        self.trigger = DeployTrigger(client_factory)
        self.gate = StatusGate(client_factory)
        self.confirmer = DeploymentConfirmer(repository)

    def router(self) -> EventRouter:
        """Router with this processor's handlers registered."""
        return EventRouter(
            {
                "push": self.handle_push,
                "status": self.handle_status,
                "deployment": self.handle_deployment,
            }
        )

    async def handle_push(self, payload: dict[str, Any]) -> list[TriggerOutcome | None]:
        event = PushEvent.from_payload(payload)
        environments = await self.resolver.environments_for(event)

        logger.info(
            "hook.push",
            repository=event.repository,
            hash=event.hash,
            branches=event.branches,
            environments=len(environments),
        )

        outcomes = []
        for environment in environments:
            outcomes.append(
                await self._deploy(environment, event.repository, event.hash, event.sender_email)
            )
        return outcomes

    async def handle_status(self, payload: dict[str, Any]) -> list[TriggerOutcome | None]:
        event = StatusEvent.from_payload(payload)
        environments = await self.resolver.environments_for(event)

        logger.info(
            "hook.status",
            repository=event.repository,
            hash=event.hash,
            state=event.state,
            environments=len(environments),
        )

        outcomes = []
        for environment in environments:
            try:
                ready = await self.gate.should_trigger(environment, event.repository, event.hash)
            except Exception:
                logger.error(
                    "hook.gate_failed",
                    repository=event.repository,
                    hash=event.hash,
                    environment=environment.name,
                    exc_info=True,
                )
                outcomes.append(None)
                continue

            if not ready:
                outcomes.append(None)
                continue

            outcomes.append(
                await self._deploy(environment, event.repository, event.hash, event.sender_email)
            )
        return outcomes

    async def handle_deployment(self, payload: dict[str, Any]) -> None:
        event = DeploymentEvent.from_payload(payload)
        await self.confirmer.confirm(event)

    async def _deploy(
        self,
        environment: Environment,
        repository: str,
        hash: str,
        sender_email: str | None,
    ) -> TriggerOutcome | None:
        try:
            pending = build_pending_deployment(environment, hash, sender_email)
            return await self.trigger.trigger(pending)
        except Exception:
            # Not retried: the operator redeploys from the logged commit
            logger.error(
                "deploy.failed",
                repository=repository,
                hash=hash,
                environment=environment.name,
                exc_info=True,
            )
            return None
