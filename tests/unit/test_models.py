"""Unit tests for data models."""

import json

import pytest
from pydantic import ValidationError

from deployhook.models.deployment import DeploymentStatus, PendingDeployment
from deployhook.models.environment import Environment, EnvironmentCreate
from deployhook.models.events import DeploymentEvent, PushEvent, StatusEvent


class TestEnvironment:
    """Tests for Environment."""

    def test_get_initiator_known_member(self, environment: Environment):
        assert environment.get_initiator("dev@acme.test") == 7

    def test_get_initiator_ignores_case(self, environment: Environment):
        assert environment.get_initiator("Dev@ACME.test") == 7

    def test_get_initiator_falls_back_to_owner(self, environment: Environment):
        assert environment.get_initiator("stranger@example.com") == 1
        assert environment.get_initiator(None) == 1

    def test_get_option(self, environment: Environment):
        assert environment.get_option("wait_for_checks") is True
        assert environment.get_option("missing", "default") == "default"

    def test_deploy_hash_builds_unsaved_deployment(self, environment: Environment):
        deployment = environment.deploy_hash("abc123", 7)

        assert deployment.id is None
        assert deployment.environment_id == environment.id
        assert deployment.hash == "abc123"
        assert deployment.initiator_id == 7
        assert deployment.status == DeploymentStatus.PENDING
        assert deployment.meta == {}

    def test_environment_create_rejects_bad_repository(self):
        with pytest.raises(ValidationError):
            EnvironmentCreate(
                name="production",
                repository="not a repo",
                branch="main",
                installation_id=1,
                owner_id=1,
            )


class TestPendingDeployment:
    """Tests for PendingDeployment."""

    def test_requires_hash(self, environment: Environment):
        with pytest.raises(ValidationError):
            PendingDeployment(environment=environment, hash="", user_id=1)

    def test_requires_user(self, environment: Environment):
        with pytest.raises(ValidationError):
            PendingDeployment(environment=environment, hash="abc123")

    def test_is_immutable(self, environment: Environment):
        pending = PendingDeployment(environment=environment, hash="abc123", user_id=1)

        with pytest.raises(ValidationError):
            pending.hash = "def456"


class TestPushEvent:
    """Tests for PushEvent parsing."""

    def test_branch_push(self, push_payload):
        event = PushEvent.from_payload(push_payload(hash="abc123"))

        assert event.repository == "acme/shop"
        assert event.hash == "abc123"
        assert event.branches == ["main"]
        assert event.sender_email == "dev@acme.test"

    def test_sender_falls_back_to_pusher(self, push_payload):
        payload = push_payload(head_commit=None)

        event = PushEvent.from_payload(payload)

        assert event.sender_email == "pusher@acme.test"

    def test_tag_push_has_no_branches(self, push_payload):
        event = PushEvent.from_payload(push_payload(ref="refs/tags/v1.0.0"))
        assert event.branches == []

    def test_branch_deletion_has_no_branches(self, push_payload):
        event = PushEvent.from_payload(push_payload(hash="0" * 40, deleted=True))
        assert event.branches == []


class TestStatusEvent:
    """Tests for StatusEvent parsing."""

    def test_status(self, status_payload):
        event = StatusEvent.from_payload(
            status_payload(hash="def456", branches=("main", "release"))
        )

        assert event.hash == "def456"
        assert event.state == "success"
        assert event.branches == ["main", "release"]
        assert event.sender_email == "dev@acme.test"


class TestDeploymentEvent:
    """Tests for DeploymentEvent parsing."""

    def test_deployment(self, deployment_payload):
        event = DeploymentEvent.from_payload(
            deployment_payload(environment_id=3, deployment_id=99, initiator_id=7)
        )

        assert event.repository == "acme/shop"
        assert event.deployment_id == 99
        assert event.hash == "abc123"
        assert event.environment_id == 3
        assert event.environment_name == "production"
        assert event.installation_id == 4242
        assert event.initiator_id == 7
        assert event.manual is False

    def test_manual_flag(self, deployment_payload):
        event = DeploymentEvent.from_payload(deployment_payload(manual=True))
        assert event.manual is True

    def test_string_payload_is_decoded(self, deployment_payload):
        payload = deployment_payload()
        payload["deployment"]["payload"] = json.dumps(
            {"environment_id": 5, "initiator_id": 8, "manual": True}
        )

        event = DeploymentEvent.from_payload(payload)

        assert event.environment_id == 5
        assert event.initiator_id == 8
        assert event.manual is True

    def test_foreign_deployment_without_payload(self, deployment_payload):
        payload = deployment_payload()
        payload["deployment"]["payload"] = ""

        event = DeploymentEvent.from_payload(payload)

        assert event.environment_id is None
        assert event.initiator_id is None
        assert event.manual is False
