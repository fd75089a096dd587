"""Tests for the backlog view."""

from unittest.mock import MagicMock

import pytest

from agile_board.backlog import Backlog
from agile_board.errors import ServiceError
from agile_board.events import EventBus
from agile_board.models import PbiState, ProductBacklogItem
from agile_board.notifications import Notifier
from agile_board.services import PbiService


@pytest.fixture
def items() -> list[ProductBacklogItem]:
    return [
        ProductBacklogItem(id="1", description="Login page", technical_description="Use OAuth"),
        ProductBacklogItem(id="2", description="Export report"),
        ProductBacklogItem(id="3", description="Old idea", is_deleted=True),
    ]


@pytest.fixture
def service(items: list[ProductBacklogItem]) -> MagicMock:
    pbis = MagicMock(spec=PbiService)
    pbis.get_all.return_value = items
    return pbis


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def backlog(service: MagicMock, bus: EventBus, notifier: Notifier) -> Backlog:
    view = Backlog(service, bus, notifier)
    view.refresh()
    return view


def test_refresh_hides_deleted(backlog: Backlog) -> None:
    """Test that soft-deleted PBIs are not listed."""
    assert [pbi.id for pbi in backlog.items] == ["1", "2"]
    assert backlog.error is None


def test_refresh_failure_sets_error(service: MagicMock, bus: EventBus, notifier: Notifier) -> None:
    """Test that a failed load records the error and shows a toast."""
    service.get_all.side_effect = ServiceError("Network error. Please check your connection and try again.")
    view = Backlog(service, bus, notifier)

    with pytest.raises(ServiceError):
        view.refresh()

    assert view.error == "Network error. Please check your connection and try again."
    assert notifier.messages("error") == [
        "Failed to load PBIs: Network error. Please check your connection and try again."
    ]


def test_search_matches_all_descriptions(backlog: Backlog) -> None:
    """Test case-insensitive search over the description texts."""
    assert [pbi.id for pbi in backlog.search("oauth")] == ["1"]
    assert [pbi.id for pbi in backlog.search("EXPORT")] == ["2"]
    assert [pbi.id for pbi in backlog.search("  ")] == ["1", "2"]
    assert backlog.search("old idea") == []


def test_update_publishes_change(backlog: Backlog, service: MagicMock, bus: EventBus, notifier: Notifier) -> None:
    """Test that a successful update is applied and announced."""
    board_view = MagicMock()
    bus.subscribe(board_view)
    changed = ProductBacklogItem(id="1", description="Login page", state=PbiState.CLOSED)

    backlog.update(changed)

    service.update.assert_called_once_with(changed)
    assert backlog.items[0].state is PbiState.CLOSED
    assert notifier.messages("success") == ["PBI updated"]
    board_view.assert_called_once()


def test_failed_update_resyncs(backlog: Backlog, service: MagicMock, notifier: Notifier) -> None:
    """Test that a rejected update reloads the list and re-raises."""
    service.update.side_effect = ServiceError("Forbidden. You don't have permission for this action.", 403)

    with pytest.raises(ServiceError):
        backlog.update(ProductBacklogItem(id="1", description="Renamed"))

    assert backlog.items[0].description == "Login page"
    assert service.get_all.call_count == 2
    assert notifier.messages("error") == ["Failed to update PBI: Forbidden. You don't have permission for this action."]


def test_delete_hides_item(backlog: Backlog, service: MagicMock, notifier: Notifier) -> None:
    """Test that a deleted PBI disappears from the list."""
    backlog.delete("2")

    service.delete.assert_called_once_with("2")
    assert [pbi.id for pbi in backlog.items] == ["1"]
    assert notifier.messages("success") == ["PBI deleted"]


def test_create_refreshes(backlog: Backlog, service: MagicMock, notifier: Notifier) -> None:
    """Test that creating a PBI reloads the list."""
    backlog.create(ProductBacklogItem(id="", description="New thing"))

    service.create.assert_called_once()
    assert service.get_all.call_count == 2
    assert notifier.messages("success") == ["PBI created"]


def test_create_succeeds_when_reload_fails(
    backlog: Backlog, service: MagicMock, bus: EventBus, notifier: Notifier
) -> None:
    """Test that a reload failing after a create is not reported as a failed create."""
    board_view = MagicMock()
    bus.subscribe(board_view)
    service.get_all.side_effect = ServiceError("Network error. Please check your connection and try again.")

    backlog.create(ProductBacklogItem(id="", description="New thing"))

    service.create.assert_called_once()
    assert notifier.messages("success") == ["PBI created"]
    assert notifier.messages("error") == [
        "Failed to load PBIs: Network error. Please check your connection and try again."
    ]
    assert backlog.error == "Network error. Please check your connection and try again."
    board_view.assert_called_once()


def test_failed_create_is_not_announced(
    backlog: Backlog, service: MagicMock, bus: EventBus, notifier: Notifier
) -> None:
    """Test that a rejected create shows an error and re-raises without publishing."""
    board_view = MagicMock()
    bus.subscribe(board_view)
    service.create.side_effect = ServiceError("Invalid request")

    with pytest.raises(ServiceError):
        backlog.create(ProductBacklogItem(id="", description="New thing"))

    assert notifier.messages("error") == ["Failed to create PBI: Invalid request"]
    assert notifier.messages("success") == []
    assert service.get_all.call_count == 1
    board_view.assert_not_called()


def test_failed_delete_resyncs(backlog: Backlog, service: MagicMock, notifier: Notifier) -> None:
    """Test that a rejected delete shows the PBI again and re-raises."""
    service.delete.side_effect = ServiceError("PBI not found", 404)

    with pytest.raises(ServiceError):
        backlog.delete("2")

    assert [pbi.id for pbi in backlog.items] == ["1", "2"]
    assert service.get_all.call_count == 2
    assert notifier.messages("error") == ["Failed to delete PBI: PBI not found"]


def test_change_elsewhere_reloads(backlog: Backlog, service: MagicMock, bus: EventBus) -> None:
    """Test that the backlog reloads when another view publishes."""
    bus.publish()
    assert service.get_all.call_count == 2

    backlog.close()
    bus.publish()
    assert service.get_all.call_count == 2
