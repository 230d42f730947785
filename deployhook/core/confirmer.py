"""Record deployments confirmed by the source provider."""

from dataclasses import dataclass
from enum import Enum

from deployhook.core.repository import EnvironmentRepository
from deployhook.models.deployment import Deployment
from deployhook.models.environment import Environment
from deployhook.models.events import DeploymentEvent
from deployhook.utils.logging import get_logger

logger = get_logger(__name__)


class Rejection(str, Enum):
    """Why a deployment event was not recorded."""

    UNRESOLVED_ENVIRONMENT = "unresolved_environment"
    INSTALLATION_MISMATCH = "installation_mismatch"
    MANUAL_DEPLOYMENT = "manual_deployment"


@dataclass(frozen=True)
class Confirmation:
    """Verdict on a deployment event."""

    environment: Environment | None = None
    rejection: Rejection | None = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None

    @classmethod
    def accept(cls, environment: Environment) -> "Confirmation":
        return cls(environment=environment)

    @classmethod
    def reject(cls, reason: Rejection) -> "Confirmation":
        return cls(rejection=reason)


class DeploymentConfirmer:
    """Turns provider deployment events into local deployment records."""

    def __init__(self, repository: EnvironmentRepository):
        self._repository = repository

    async def validate(self, event: DeploymentEvent) -> Confirmation:
        """Check the event against the environment it claims to belong to."""
        environment = await self._repository.environment_by_provider_event(event)
        if environment is None:
            return Confirmation.reject(Rejection.UNRESOLVED_ENVIRONMENT)

        if environment.source_provider.installation_id != event.installation_id:
            return Confirmation.reject(Rejection.INSTALLATION_MISMATCH)

        # Manual deployments are operator-initiated, never auto-confirmed
        if event.manual:
            return Confirmation.reject(Rejection.MANUAL_DEPLOYMENT)

        return Confirmation.accept(environment)

    async def confirm(self, event: DeploymentEvent) -> Deployment | None:
        """Persist the deployment described by ``event`` if it checks out."""
        verdict = await self.validate(event)
        if not verdict.accepted:
            logger.debug(
                "confirm.ignored",
                repository=event.repository,
                github_deployment_id=event.deployment_id,
                reason=verdict.rejection.value,
            )
            return None

        environment = verdict.environment
        existing = await self._repository.find_deployment_by_github_id(
            environment.id, event.deployment_id
        )
        if existing is not None:
            logger.info(
                "confirm.redelivered",
                deployment_id=existing.id,
                environment=environment.name,
                github_deployment_id=event.deployment_id,
            )
            return existing

        initiator_id = event.initiator_id
        if initiator_id is None:
            initiator_id = environment.get_initiator(None)

        deployment = environment.deploy_hash(event.hash, initiator_id)
        deployment.meta = {"github_deployment_id": event.deployment_id}
        deployment = await self._repository.save_deployment(deployment)

        logger.info(
            "confirm.recorded",
            deployment_id=deployment.id,
            environment=environment.name,
            hash=event.hash,
            github_deployment_id=event.deployment_id,
        )
        return deployment
