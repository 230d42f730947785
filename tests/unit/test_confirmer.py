"""Unit tests for the deployment confirmer."""

import pytest

from deployhook.core.confirmer import DeploymentConfirmer, Rejection
from deployhook.core.repository import EnvironmentRepository
from deployhook.models.deployment import DeploymentStatus
from deployhook.models.events import DeploymentEvent


class TestDeploymentConfirmer:
    """Tests for DeploymentConfirmer."""

    @pytest.fixture
    def confirmer(self, repository: EnvironmentRepository) -> DeploymentConfirmer:
        return DeploymentConfirmer(repository)

    @pytest.mark.asyncio
    async def test_records_confirmed_deployment(
        self, confirmer, repository, create_environment, deployment_payload
    ):
        environment = await create_environment()
        event = DeploymentEvent.from_payload(
            deployment_payload(environment_id=environment.id, hash="abc123", deployment_id=99)
        )

        deployment = await confirmer.confirm(event)

        assert deployment is not None
        assert deployment.id is not None
        assert deployment.hash == "abc123"
        assert deployment.initiator_id == 7
        assert deployment.status == DeploymentStatus.PENDING
        assert deployment.meta == {"github_deployment_id": 99}

        stored = await repository.list_deployments(environment.id)
        assert [d.id for d in stored] == [deployment.id]

    @pytest.mark.asyncio
    async def test_redelivered_event_is_recorded_once(
        self, confirmer, repository, create_environment, deployment_payload
    ):
        environment = await create_environment()
        event = DeploymentEvent.from_payload(
            deployment_payload(environment_id=environment.id, deployment_id=99)
        )

        first = await confirmer.confirm(event)
        second = await confirmer.confirm(event)

        assert first is not None
        assert second is not None
        assert second.id == first.id
        assert await repository.count_deployments() == 1

    @pytest.mark.asyncio
    async def test_unknown_environment(self, confirmer, repository, deployment_payload):
        event = DeploymentEvent.from_payload(deployment_payload(environment_id=404))

        verdict = await confirmer.validate(event)

        assert verdict.rejection == Rejection.UNRESOLVED_ENVIRONMENT
        assert await confirmer.confirm(event) is None
        assert await repository.count_deployments() == 0

    @pytest.mark.asyncio
    async def test_installation_mismatch(
        self, confirmer, repository, create_environment, deployment_payload
    ):
        environment = await create_environment()
        event = DeploymentEvent.from_payload(
            deployment_payload(environment_id=environment.id, installation_id=1)
        )

        verdict = await confirmer.validate(event)

        assert verdict.rejection == Rejection.INSTALLATION_MISMATCH
        assert await confirmer.confirm(event) is None
        assert await repository.count_deployments() == 0

    @pytest.mark.asyncio
    async def test_manual_deployment(
        self, confirmer, repository, create_environment, deployment_payload
    ):
        environment = await create_environment()
        event = DeploymentEvent.from_payload(
            deployment_payload(environment_id=environment.id, manual=True)
        )

        verdict = await confirmer.validate(event)

        assert verdict.rejection == Rejection.MANUAL_DEPLOYMENT
        assert await confirmer.confirm(event) is None
        assert await repository.count_deployments() == 0

    @pytest.mark.asyncio
    async def test_foreign_deployment_uses_default_initiator(
        self, confirmer, create_environment, deployment_payload
    ):
        environment = await create_environment(name="staging", owner_id=3)
        event = DeploymentEvent.from_payload(
            deployment_payload(
                environment_id=None,
                initiator_id=None,
                environment_name="staging",
            )
        )

        deployment = await confirmer.confirm(event)

        assert deployment is not None
        assert deployment.environment_id == environment.id
        assert deployment.initiator_id == 3
