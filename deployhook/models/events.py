"""GitHub webhook event models.

Each model keeps only the fields the deployment decisions need and knows how
to build itself from the raw webhook JSON.
"""

import json
from typing import Any

from pydantic import BaseModel, Field

BRANCH_REF_PREFIX = "refs/heads/"
NULL_SHA = "0" * 40


def _dig(data: Any, *path: str) -> Any:
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


class PushEvent(BaseModel):
    """Commits pushed to a branch."""

    repository: str
    hash: str
    sender_email: str | None = None
    branches: list[str] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PushEvent":
        ref = payload.get("ref") or ""
        after = payload.get("after") or ""

        # Tag pushes and branch deletions do not affect any tracked branch
        branches = []
        if ref.startswith(BRANCH_REF_PREFIX) and after != NULL_SHA and not payload.get("deleted"):
            branches.append(ref[len(BRANCH_REF_PREFIX):])

        sender_email = _dig(payload, "head_commit", "author", "email") or _dig(
            payload, "pusher", "email"
        )

        return cls(
            repository=_dig(payload, "repository", "full_name") or "",
            hash=after,
            sender_email=sender_email,
            branches=branches,
        )


class StatusEvent(BaseModel):
    """A commit status changed."""

    repository: str
    hash: str
    state: str = "pending"
    sender_email: str | None = None
    branches: list[str] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "StatusEvent":
        branches = [
            branch["name"]
            for branch in payload.get("branches") or []
            if isinstance(branch, dict) and branch.get("name")
        ]

        return cls(
            repository=_dig(payload, "repository", "full_name") or "",
            hash=payload.get("sha") or "",
            state=payload.get("state") or "pending",
            sender_email=_dig(payload, "commit", "commit", "author", "email"),
            branches=branches,
        )


class DeploymentEvent(BaseModel):
    """GitHub created a deployment."""

    repository: str
    deployment_id: int
    hash: str
    environment_name: str | None = None
    environment_id: int | None = None
    installation_id: int | None = None
    initiator_id: int | None = None
    manual: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "DeploymentEvent":
        deployment = payload.get("deployment") or {}
        # GitHub allows the deployment payload to be a JSON-encoded string
        extra = deployment.get("payload")
        if isinstance(extra, str):
            try:
                extra = json.loads(extra)
            except ValueError:
                extra = {}
        if not isinstance(extra, dict):
            extra = {}

        return cls(
            repository=_dig(payload, "repository", "full_name") or "",
            deployment_id=deployment.get("id") or 0,
            hash=deployment.get("sha") or "",
            environment_name=deployment.get("environment"),
            environment_id=extra.get("environment_id"),
            installation_id=_dig(payload, "installation", "id"),
            initiator_id=extra.get("initiator_id"),
            manual=bool(extra.get("manual", False)),
        )
