"""Environment data models."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from deployhook.models.deployment import Deployment, DeploymentStatus


class EnvironmentOptions(BaseModel):
    """Per-environment deployment options."""

    wait_for_checks: bool = False


class SourceProviderBinding(BaseModel):
    """Link between an environment and a provider installation."""

    provider: Literal["github"] = "github"
    installation_id: int


class EnvironmentCreate(BaseModel):
    """Request model for creating an environment."""

    name: str = Field(..., min_length=1, max_length=100)
    repository: str = Field(..., pattern=r"^[\w.-]+/[\w.-]+$")
    branch: str = Field(..., min_length=1)
    installation_id: int
    owner_id: int
    options: EnvironmentOptions = Field(default_factory=EnvironmentOptions)
    members: dict[str, int] = Field(default_factory=dict)


class Environment(BaseModel):
    """A named deployment target bound to one branch of a repository."""

    id: int
    name: str
    repository: str
    branch: str
    options: EnvironmentOptions = Field(default_factory=EnvironmentOptions)
    source_provider: SourceProviderBinding
    owner_id: int
    members: dict[str, int] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def wait_for_checks(self) -> bool:
        return self.options.wait_for_checks

    def get_option(self, key: str, default: Any = None) -> Any:
        """Read an option by name."""
        return getattr(self.options, key, default)

    def get_initiator(self, email: str | None) -> int:
        """Map a committer email to a user id, falling back to the owner."""
        if email:
            for member_email, user_id in self.members.items():
                if member_email.lower() == email.lower():
                    return user_id
        return self.owner_id

    def deploy_hash(self, hash: str, initiator_id: int) -> Deployment:
        """Build an unsaved deployment of ``hash`` to this environment."""
        return Deployment(
            environment_id=self.id,
            hash=hash,
            initiator_id=initiator_id,
            status=DeploymentStatus.PENDING,
        )
