"""Tests for the sprint, epic and feature services."""

import pytest
from conftest import FakeGateway

from agile_board.client import GatewayClient
from agile_board.errors import ServiceError
from agile_board.models import Epic, Sprint, SprintState
from agile_board.services import EpicService, FeatureService, SprintService


def test_sprints_of_team(client: GatewayClient, gateway: FakeGateway) -> None:
    """Test listing team sprints with both state encodings."""
    gateway.add_data(
        "GET",
        "/sprint/team/t1",
        [
            {"id": "s1", "name": "Sprint 1", "state": 1, "startDate": "2024-01-01T00:00:00"},
            {"id": "s2", "name": "Sprint 2", "state": "INACTIVE"},
            {"id": "s3", "name": "Sprint 0", "state": "COMPLETED"},
        ],
    )
    sprints = SprintService(client).get_by_team("t1")
    assert [s.state for s in sprints] == [SprintState.ACTIVE, SprintState.PLANNED, SprintState.COMPLETED]
    assert sprints[0].start_date.year == 2024


def test_sprints_of_team_failure(client: GatewayClient, gateway: FakeGateway) -> None:
    """Test the fallback message for sprint listings."""
    gateway.add("GET", "/sprint/team/t1", status=503)
    with pytest.raises(ServiceError, match="Failed to fetch sprints for team: t1"):
        SprintService(client).get_by_team("t1")


def test_sprint_payload(client: GatewayClient, gateway: FakeGateway) -> None:
    """Test that sprint states are sent by name."""
    gateway.add_data("PUT", "/sprint", None)
    SprintService(client).update(Sprint(id="s1", name="Sprint 1", state=SprintState.CANCELLED))
    assert gateway.body()["state"] == "CANCELLED"


def test_sprints_of_project(client: GatewayClient, gateway: FakeGateway) -> None:
    """Test listing project sprints."""
    gateway.add_data("GET", "/sprint/project/p1", [{"id": "s1", "name": "Sprint 1"}])
    assert SprintService(client).get_by_project("p1")[0].state is SprintState.PLANNED


def test_epic_exist_path(client: GatewayClient, gateway: FakeGateway) -> None:
    """Test that epics use the isExist path."""
    gateway.add_data("GET", "/epic/isExist/e1", False)
    assert EpicService(client).is_exist("e1") is False


def test_epics_of_team(client: GatewayClient, gateway: FakeGateway) -> None:
    """Test listing the epics of a team."""
    gateway.add_data("GET", "/epic/team/t1", [{"id": "e1", "title": "Reporting", "teamId": "t1"}])
    epics = EpicService(client).get_by_team("t1")
    assert epics == [Epic(id="e1", title="Reporting", team_id="t1")]


def test_epic_create(client: GatewayClient, gateway: FakeGateway) -> None:
    """Test creating an epic."""
    gateway.add_data("POST", "/epic", {"id": "e2", "title": "Billing"})
    created = EpicService(client).create(Epic(id="", title="Billing"))
    assert created.id == "e2"
    assert gateway.body()["title"] == "Billing"


def test_features_of_epic(client: GatewayClient, gateway: FakeGateway) -> None:
    """Test listing the features of an epic."""
    gateway.add_data("GET", "/feature/epic/e1", [{"id": "f1", "title": "Search", "isCompleted": True}])
    features = FeatureService(client).get_by_epic("e1")
    assert features[0].is_completed is True


def test_feature_exist_path(client: GatewayClient, gateway: FakeGateway) -> None:
    """Test that features use the isExist path."""
    gateway.add_data("GET", "/feature/isExist/f1", True)
    assert FeatureService(client).is_exist("f1") is True
