"""Services for the deployhook application."""

from deployhook.services.github import GitHubClient, client_for, get_github_client
from deployhook.services.signature import verify_webhook_payload

__all__ = [
    "GitHubClient",
    "client_for",
    "get_github_client",
    "verify_webhook_payload",
]
