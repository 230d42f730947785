"""Build deployment intents."""

from deployhook.models.deployment import PendingDeployment
from deployhook.models.environment import Environment


def build_pending_deployment(
    environment: Environment, hash: str, sender_email: str | None
) -> PendingDeployment:
    """Intent to deploy ``hash`` to ``environment`` for the commit's sender."""
    return PendingDeployment(
        environment=environment,
        hash=hash,
        user_id=environment.get_initiator(sender_email),
    )
