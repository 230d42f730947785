"""Submit deployment intents to the source provider."""

from deployhook.core.exceptions import (
    GitHubAutoMergedError,
    GitHubDeploymentConflictError,
)
from deployhook.core.provider import ClientFactory, provider_client
from deployhook.models.deployment import PendingDeployment, TriggerOutcome
from deployhook.utils.logging import get_logger

logger = get_logger(__name__)


class DeployTrigger:
    """Creates provider deployments for pending deployments.

    The provider decides whether a deployment for the same target is already
    in flight. Its auto-merge and conflict refusals are expected outcomes and
    are reported as skips. Any other provider error propagates to the caller.
    """

    def __init__(self, client_factory: ClientFactory):
        self._client_factory = client_factory

    async def trigger(self, pending: PendingDeployment) -> TriggerOutcome:
        environment = pending.environment
        client = provider_client(environment, self._client_factory)

        try:
            await client.create_deployment(pending)
        except GitHubAutoMergedError:
            logger.info(
                "deploy.skipped_auto_merged",
                repository=environment.repository,
                hash=pending.hash,
                environment=environment.name,
            )
            return TriggerOutcome.AUTO_MERGED_SKIP
        except GitHubDeploymentConflictError as e:
            logger.info(
                "deploy.skipped_conflict",
                repository=environment.repository,
                hash=pending.hash,
                environment=environment.name,
                reason=e.message,
            )
            return TriggerOutcome.CONFLICT_SKIP

        logger.info(
            "deploy.created",
            repository=environment.repository,
            hash=pending.hash,
            environment=environment.name,
            user_id=pending.user_id,
        )
        return TriggerOutcome.CREATED
