"""Tests for the dashboard service."""

import pytest
from conftest import FakeGateway

from agile_board.client import GatewayClient
from agile_board.errors import ServiceError
from agile_board.models import BugStatus, PbiState
from agile_board.services import DashboardService


@pytest.fixture
def service(client: GatewayClient) -> DashboardService:
    return DashboardService(client)


def test_get_by_sprint(service: DashboardService, gateway: FakeGateway) -> None:
    """Test the sprint dashboard aggregate."""
    gateway.add_data(
        "GET",
        "/dashboard/sprint/s1",
        {
            "productBacklogItems": [{"id": "p1", "state": "ACTIVE"}],
            "bugs": [{"id": "b1", "status": "NEW"}],
        },
    )
    dashboard = service.get_by_sprint("s1")
    assert dashboard.product_backlog_items[0].state is PbiState.ACTIVE
    assert dashboard.bugs[0].status is BugStatus.NEW
    assert dashboard.simulated is False


def test_get_by_user_missing_lists(service: DashboardService, gateway: FakeGateway) -> None:
    """Test that missing collections are empty."""
    gateway.add_data("GET", "/dashboard/user/u1", {"productBacklogItems": None})
    dashboard = service.get_by_user("u1")
    assert dashboard.product_backlog_items == []
    assert dashboard.bugs == []


def test_failure_propagates(service: DashboardService, gateway: FakeGateway) -> None:
    """Test that dashboard failures are not replaced by demo data."""
    gateway.add("GET", "/dashboard/sprint/s1", status=500)
    with pytest.raises(ServiceError):
        service.get_by_sprint("s1")


def test_get_recent(service: DashboardService, gateway: FakeGateway) -> None:
    """Test the recent items query."""
    gateway.add_data("GET", "/teams/t1/dashboard/recent", {"productBacklogItems": [], "bugs": []})
    service.get_recent("t1", limit=3)
    assert gateway.requests[-1].url.params["limit"] == "3"


def test_get_summary_metrics(service: DashboardService, gateway: FakeGateway) -> None:
    """Test the server-side counters."""
    gateway.add_data("GET", "/teams/t1/dashboard/metrics", {"totalPBIs": 10, "completedPBIs": "4", "totalBugs": 2})
    assert service.get_summary_metrics("t1") == {
        "totalPBIs": 10,
        "completedPBIs": 4,
        "totalBugs": 2,
        "resolvedBugs": 0,
    }


def test_malformed_item_is_service_error(service: DashboardService, gateway: FakeGateway) -> None:
    """Test that an unreadable item in the aggregate is a service error."""
    gateway.add_data(
        "GET",
        "/dashboard/sprint/s1",
        {"productBacklogItems": [{"id": "p1"}], "bugs": [{"id": "b1", "status": "WONTFIX"}]},
    )
    with pytest.raises(ServiceError, match="Unexpected response from server"):
        service.get_by_sprint("s1")


def test_non_numeric_metric_is_service_error(service: DashboardService, gateway: FakeGateway) -> None:
    """Test that a counter that is not a number is a service error."""
    gateway.add_data("GET", "/teams/t1/dashboard/metrics", {"totalPBIs": "many"})
    with pytest.raises(ServiceError, match="Unexpected response from server"):
        service.get_summary_metrics("t1")
