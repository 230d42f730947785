"""GitHub REST API client.

Implements the provider operations the deployment trigger needs: creating
deployments, reading commit checks and reading branch heads.
"""

from functools import lru_cache
from typing import Any
from urllib.parse import quote

import httpx

from deployhook.config import settings
from deployhook.core.exceptions import (
    GitHubAutoMergedError,
    GitHubDeploymentConflictError,
    ProviderTransportError,
)
from deployhook.core.provider import SourceProviderClient
from deployhook.models.deployment import PendingDeployment
from deployhook.models.environment import SourceProviderBinding
from deployhook.utils.logging import get_logger

logger = get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"
PASSING_CONCLUSIONS = {"success", "neutral", "skipped"}


class GitHubClient:
    """Async GitHub API client."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": "deployhook",
        }
        token = token if token is not None else settings.github_token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url or settings.github_api_url,
            headers=headers,
            timeout=timeout or settings.github_timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("github.request_failed", method=method, url=url, error=str(e))
            raise ProviderTransportError(str(e)) from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        message = _error_message(response)
        raise ProviderTransportError(
            f"{response.request.method} {response.request.url.path} "
            f"returned {response.status_code}: {message}",
            status_code=response.status_code,
        )

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        """Decoded JSON object of a successful response."""
        self._raise_for_status(response)
        try:
            body = response.json()
        except ValueError as e:
            raise ProviderTransportError(
                f"{response.request.method} {response.request.url.path} "
                f"returned a malformed body",
                status_code=response.status_code,
            ) from e
        if not isinstance(body, dict):
            raise ProviderTransportError(
                f"{response.request.method} {response.request.url.path} "
                f"returned {type(body).__name__}, expected an object",
                status_code=response.status_code,
            )
        return body

    async def create_deployment(self, pending: PendingDeployment) -> None:
        """Create a GitHub deployment for a pending deployment."""
        environment = pending.environment
        repository = environment.repository

        response = await self._request(
            "POST",
            f"/repos/{_path(repository)}/deployments",
            json={
                "ref": pending.hash,
                "environment": environment.name,
                "auto_merge": True,
                # Checks are gated before we get here
                "required_contexts": [],
                "description": f"Deploy {pending.hash[:7]} to {environment.name}",
                "payload": {
                    "environment_id": environment.id,
                    "initiator_id": pending.user_id,
                    "manual": False,
                },
            },
        )

        if response.status_code == 409:
            raise GitHubDeploymentConflictError(repository, _error_message(response))

        # GitHub answers 202 when it merged the default branch into the ref
        # instead of creating the deployment
        if response.status_code == 202:
            message = _error_message(response)
            if "auto-merged" in message.lower():
                raise GitHubAutoMergedError(repository, message)

        self._raise_for_status(response)

        logger.info(
            "github.deployment_created",
            repository=repository,
            environment=environment.name,
            hash=pending.hash,
            status_code=response.status_code,
        )

    async def commit_checks_successful(self, repository: str, hash: str) -> bool:
        """Whether every commit status and check run for ``hash`` passed."""
        response = await self._request(
            "GET", f"/repos/{_path(repository)}/commits/{_path(hash)}/status"
        )
        combined = self._json(response)

        # A commit without any statuses reports "pending"
        if (combined.get("total_count") or 0) > 0 and combined.get("state") != "success":
            return False

        response = await self._request(
            "GET",
            f"/repos/{_path(repository)}/commits/{_path(hash)}/check-runs",
            params={"per_page": 100},
        )

        for check_run in self._json(response).get("check_runs") or []:
            if not isinstance(check_run, dict) or check_run.get("status") != "completed":
                return False
            if check_run.get("conclusion") not in PASSING_CONCLUSIONS:
                return False

        return True

    async def latest_hash_for(self, repository: str, branch: str) -> str:
        """Current head commit of ``branch``."""
        response = await self._request(
            "GET", f"/repos/{_path(repository)}/branches/{_path(branch)}"
        )
        commit = self._json(response).get("commit")
        sha = commit.get("sha") if isinstance(commit, dict) else None
        if not isinstance(sha, str) or not sha:
            raise ProviderTransportError(
                f"GitHub returned no head commit for {repository}@{branch}",
                status_code=response.status_code,
            )
        return sha


def _path(segment: str) -> str:
    """Percent-encode a value for use in a URL path, keeping ``/``."""
    # Branch names may contain "#", "%" or "?"
    return quote(segment, safe="/")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return body.get("message") or ""
    return ""


@lru_cache
def get_github_client() -> GitHubClient:
    """Get the shared GitHub client."""
    return GitHubClient()


def client_for(binding: SourceProviderBinding) -> SourceProviderClient:
    """Resolve the API client for an environment's provider binding."""
    # All installations share the configured token
    return get_github_client()
