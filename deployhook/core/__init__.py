"""Core functionality for deployhook."""

from deployhook.core.exceptions import (
    AuthenticationFailure,
    DeployHookError,
    DuplicateEnvironmentError,
    EnvironmentNotFoundError,
    GitHubAutoMergedError,
    GitHubDeploymentConflictError,
    ProviderError,
    ProviderTransportError,
)
from deployhook.core.repository import EnvironmentRepository, get_environment_repository
from deployhook.core.hooks import GitHubHookProcessor
from deployhook.core.router import EventRouter

__all__ = [
    "AuthenticationFailure",
    "DeployHookError",
    "DuplicateEnvironmentError",
    "EnvironmentNotFoundError",
    "GitHubAutoMergedError",
    "GitHubDeploymentConflictError",
    "ProviderError",
    "ProviderTransportError",
    "EnvironmentRepository",
    "get_environment_repository",
    "GitHubHookProcessor",
    "EventRouter",
]
