"""Decide whether a commit status should trigger a deployment."""

from deployhook.core.provider import ClientFactory, provider_client
from deployhook.models.environment import Environment
from deployhook.utils.logging import get_logger

logger = get_logger(__name__)


class StatusGate:
    """Only lets a status event through once checks passed on the branch head."""

    def __init__(self, client_factory: ClientFactory):
        self._client_factory = client_factory

    async def should_trigger(
        self, environment: Environment, repository: str, hash: str
    ) -> bool:
        """Whether ``hash`` is ready to deploy to ``environment``.

        The checks run cheapest first. The branch head is read last, right
        before the caller triggers, since the branch may have advanced past
        ``hash`` while its checks were running.
        """
        if not environment.get_option("wait_for_checks"):
            return False

        client = provider_client(environment, self._client_factory)

        if not await client.commit_checks_successful(repository, hash):
            logger.debug(
                "gate.checks_pending",
                repository=repository,
                hash=hash,
                environment=environment.name,
            )
            return False

        latest_hash = await client.latest_hash_for(repository, environment.branch)
        if latest_hash != hash:
            logger.info(
                "gate.stale_commit",
                repository=repository,
                hash=hash,
                branch=environment.branch,
                latest_hash=latest_hash,
            )
            return False

        return True
