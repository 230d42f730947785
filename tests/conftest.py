"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Any, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from deployhook.api.deps import get_event_router, get_repository
from deployhook.config import Settings, get_settings
from deployhook.core.hooks import GitHubHookProcessor
from deployhook.core.repository import EnvironmentRepository
from deployhook.main import app
from deployhook.models.deployment import PendingDeployment
from deployhook.models.environment import (
    Environment,
    EnvironmentCreate,
    EnvironmentOptions,
    SourceProviderBinding,
)

WEBHOOK_SECRET = "test-webhook-secret"
REPOSITORY = "acme/shop"
INSTALLATION_ID = 4242


class FakeProviderClient:
    """Provider client that records calls instead of talking to GitHub."""

    def __init__(self):
        self.created: list[PendingDeployment] = []
        self.check_calls: list[tuple[str, str]] = []
        self.head_calls: list[tuple[str, str]] = []
        self.checks_pass = True
        self.heads: dict[str, str] = {}
        self.create_errors: dict[int, Exception] = {}
        # Raised by commit_checks_successful, one per call, in order
        self.check_errors: list[Exception] = []

    async def create_deployment(self, pending: PendingDeployment) -> None:
        self.created.append(pending)
        error = self.create_errors.get(pending.environment.id)
        if error is not None:
            raise error

    async def commit_checks_successful(self, repository: str, hash: str) -> bool:
        self.check_calls.append((repository, hash))
        if self.check_errors:
            raise self.check_errors.pop(0)
        return self.checks_pass

    async def latest_hash_for(self, repository: str, branch: str) -> str:
        self.head_calls.append((repository, branch))
        return self.heads[branch]


@pytest.fixture
def provider() -> FakeProviderClient:
    """Fresh fake provider client."""
    return FakeProviderClient()


@pytest.fixture
def client_factory(provider: FakeProviderClient) -> Callable[[SourceProviderBinding], FakeProviderClient]:
    return lambda binding: provider


@pytest.fixture
def repository(tmp_path: Path) -> EnvironmentRepository:
    """Repository backed by a throwaway SQLite file."""
    return EnvironmentRepository(tmp_path / "deployhook.db")


@pytest.fixture
def processor(
    repository: EnvironmentRepository, client_factory: Callable
) -> GitHubHookProcessor:
    return GitHubHookProcessor(repository, client_factory)


@pytest.fixture
def create_environment(
    repository: EnvironmentRepository,
) -> Callable[..., Awaitable[Environment]]:
    """Factory storing an environment with sensible defaults."""

    async def _create(**overrides: Any) -> Environment:
        data = {
            "name": "production",
            "repository": REPOSITORY,
            "branch": "main",
            "installation_id": INSTALLATION_ID,
            "owner_id": 1,
            "members": {"dev@acme.test": 7},
            "options": EnvironmentOptions(),
        }
        data.update(overrides)
        return await repository.create_environment(EnvironmentCreate(**data))

    return _create


@pytest.fixture
def environment() -> Environment:
    """Unsaved environment for tests that don't need the repository."""
    return Environment(
        id=1,
        name="production",
        repository=REPOSITORY,
        branch="main",
        options=EnvironmentOptions(wait_for_checks=True),
        source_provider=SourceProviderBinding(installation_id=INSTALLATION_ID),
        owner_id=1,
        members={"dev@acme.test": 7},
    )


@pytest.fixture
def push_payload() -> Callable[..., dict[str, Any]]:
    """Builder for GitHub push payloads."""

    def _build(
        hash: str = "abc123",
        ref: str = "refs/heads/main",
        email: str | None = "dev@acme.test",
        repository: str = REPOSITORY,
        **extra: Any,
    ) -> dict[str, Any]:
        payload = {
            "ref": ref,
            "before": "0" * 40,
            "after": hash,
            "repository": {"full_name": repository},
            "pusher": {"name": "dev", "email": "pusher@acme.test"},
            "head_commit": {"id": hash, "author": {"name": "Dev", "email": email}},
        }
        payload.update(extra)
        return payload

    return _build


@pytest.fixture
def status_payload() -> Callable[..., dict[str, Any]]:
    """Builder for GitHub status payloads."""

    def _build(
        hash: str = "def456",
        state: str = "success",
        branches: tuple[str, ...] = ("main",),
        repository: str = REPOSITORY,
    ) -> dict[str, Any]:
        return {
            "sha": hash,
            "state": state,
            "context": "ci/build",
            "branches": [{"name": name} for name in branches],
            "repository": {"full_name": repository},
            "commit": {"sha": hash, "commit": {"author": {"email": "dev@acme.test"}}},
        }

    return _build


@pytest.fixture
def deployment_payload() -> Callable[..., dict[str, Any]]:
    """Builder for GitHub deployment payloads."""

    def _build(
        environment_id: int | None = 1,
        deployment_id: int = 99,
        hash: str = "abc123",
        installation_id: int = INSTALLATION_ID,
        initiator_id: int | None = 7,
        manual: bool = False,
        environment_name: str = "production",
        repository: str = REPOSITORY,
    ) -> dict[str, Any]:
        extra: dict[str, Any] = {"manual": manual}
        if environment_id is not None:
            extra["environment_id"] = environment_id
        if initiator_id is not None:
            extra["initiator_id"] = initiator_id
        return {
            "action": "created",
            "deployment": {
                "id": deployment_id,
                "sha": hash,
                "ref": hash,
                "environment": environment_name,
                "payload": extra,
            },
            "repository": {"full_name": repository},
            "installation": {"id": installation_id},
        }

    return _build


@pytest.fixture
def test_settings() -> Settings:
    return Settings(github_webhook_secret=WEBHOOK_SECRET)


@pytest.fixture
async def client(
    repository: EnvironmentRepository,
    processor: GitHubHookProcessor,
    test_settings: Settings,
) -> AsyncClient:
    """Async test client wired to the temporary repository and fake provider."""
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_event_router] = processor.router
    app.dependency_overrides[get_settings] = lambda: test_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
