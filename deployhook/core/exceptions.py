"""Custom exceptions for deployhook."""

from typing import Any


class DeployHookError(Exception):
    """Base exception for deployhook."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthenticationFailure(DeployHookError):
    """Webhook signature did not match the configured secret."""

    def __init__(self, delivery_id: str | None = None):
        details = {}
        if delivery_id:
            details["delivery_id"] = delivery_id
        super().__init__("Invalid webhook signature", details)


class EnvironmentNotFoundError(DeployHookError):
    """Environment not found."""

    def __init__(self, environment_id: int):
        super().__init__(
            f"Environment not found: {environment_id}",
            {"environment_id": environment_id},
        )


class ProviderError(DeployHookError):
    """Base for errors reported by the source provider."""

    pass


class GitHubAutoMergedError(ProviderError):
    """GitHub merged the default branch into the ref instead of deploying it."""

    def __init__(self, repository: str, message: str = ""):
        super().__init__(
            message or f"Deployment for {repository} auto-merged an upstream branch",
            {"repository": repository},
        )


class GitHubDeploymentConflictError(ProviderError):
    """GitHub refused the deployment because it conflicts with another one."""

    def __init__(self, repository: str, message: str):
        super().__init__(message, {"repository": repository})


class ProviderTransportError(ProviderError):
    """Network failure or unexpected response from the provider API."""

    def __init__(self, message: str, status_code: int | None = None):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"Provider request failed: {message}", details)
        self.status_code = status_code


class DuplicateEnvironmentError(DeployHookError):
    """An environment with the same name already exists for the repository."""

    def __init__(self, repository: str, name: str):
        super().__init__(
            f"Environment '{name}' already exists for {repository}",
            {"repository": repository, "name": name},
        )
