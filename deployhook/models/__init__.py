"""Data models for deployhook."""

from deployhook.models.deployment import (
    Deployment,
    DeploymentStatus,
    PendingDeployment,
    TriggerOutcome,
)
from deployhook.models.environment import (
    Environment,
    EnvironmentCreate,
    EnvironmentOptions,
    SourceProviderBinding,
)
from deployhook.models.events import (
    DeploymentEvent,
    PushEvent,
    StatusEvent,
)

PendingDeployment.model_rebuild()

__all__ = [
    # Environment models
    "Environment",
    "EnvironmentCreate",
    "EnvironmentOptions",
    "SourceProviderBinding",
    # Deployment models
    "Deployment",
    "DeploymentStatus",
    "PendingDeployment",
    "TriggerOutcome",
    # Event models
    "DeploymentEvent",
    "PushEvent",
    "StatusEvent",
]
