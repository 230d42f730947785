"""Deployment data models."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from deployhook.models.environment import Environment


class DeploymentStatus(str, Enum):
    """Lifecycle status of a confirmed deployment."""

    PENDING = "pending"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TriggerOutcome(str, Enum):
    """Result of submitting a pending deployment to the provider."""

    CREATED = "created"
    AUTO_MERGED_SKIP = "auto_merged_skip"
    CONFLICT_SKIP = "conflict_skip"


class PendingDeployment(BaseModel):
    """Intent to deploy a commit to an environment on behalf of a user."""

    model_config = ConfigDict(frozen=True)

    environment: "Environment"
    hash: str = Field(..., min_length=1)
    user_id: int


class Deployment(BaseModel):
    """A confirmed deployment record."""

    id: int | None = None
    environment_id: int
    hash: str
    initiator_id: int
    status: DeploymentStatus = DeploymentStatus.PENDING
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)
