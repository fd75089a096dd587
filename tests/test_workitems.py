"""Tests for board row projection and aggregation."""

from datetime import datetime

import pytest

from agile_board.columns import Column
from agile_board.datasource import SimulatedDataSource
from agile_board.errors import EntityNotFoundError
from agile_board.models import Bug, BugStatus, Epic, Feature, PbiState, ProductBacklogItem, WorkItemType
from agile_board.workitems import (
    WorkItemService,
    group_by_column,
    project,
    project_bug,
    project_pbi,
    work_items_by_column,
)


@pytest.fixture
def pbis() -> list[ProductBacklogItem]:
    return [
        ProductBacklogItem(id="p1", description="Login page", state=PbiState.NEW, priority=1),
        ProductBacklogItem(id="p2", description="Report export", state=PbiState.RESOLVED, priority=2),
        ProductBacklogItem(id="p3", description="Release notes", state=PbiState.CLOSED, priority=3),
    ]


@pytest.fixture
def bugs() -> list[Bug]:
    return [
        Bug(id="b1", description="Navbar overflow", status=BugStatus.ACTIVE),
        Bug(id="b2", description="Wrong totals", status=BugStatus.RESOLVED),
    ]


def test_project_pbi() -> None:
    """Test projecting a PBI into a board row."""
    pbi = ProductBacklogItem(
        id="p1",
        description="Login page\nWith remember me",
        state=PbiState.ACTIVE,
        story_point=3,
        due_date=datetime(2024, 1, 2, 3, 4, 5),
        tag_ids=frozenset({"ui", "auth"}),
    )
    row = project_pbi(pbi)
    assert row.type is WorkItemType.PBI
    assert row.column is Column.IN_PROGRESS
    assert row.state == "In Progress"
    assert row.title == "Login page"
    assert row.source_state is PbiState.ACTIVE
    assert row.status is None
    assert row.due_date == "2024-01-02T03:04:05"
    assert row.started_date == ""
    assert row.tag_ids == ("auth", "ui")


def test_project_bug_keeps_status() -> None:
    """Test that bug rows expose their status."""
    row = project_bug(Bug(id="b1", status=BugStatus.CLOSED))
    assert row.type is WorkItemType.BUG
    assert row.column is Column.DONE
    assert row.status is BugStatus.CLOSED


def test_project_bug_without_status_is_to_do() -> None:
    """Test that a bug with a missing status stays visible in To Do."""
    row = project_bug(Bug(id="b1", status=None))
    assert row.column is Column.TO_DO


def test_project_dispatches_on_type() -> None:
    """Test projection of features and epics."""
    assert project(Feature(id="f1", title="Search", is_completed=True)).column is Column.DONE
    assert project(Feature(id="f2", title="Filters")).column is Column.TO_DO
    epic_row = project(Epic(id="e1", title="Reporting"))
    assert epic_row.type is WorkItemType.EPIC
    assert epic_row.title == "Reporting"


def test_project_rejects_unknown_type() -> None:
    """Test that unsupported objects raise."""
    with pytest.raises(TypeError):
        project("not a work item")  # type: ignore[arg-type]


def test_tag_projection_keeps_every_tag() -> None:
    """Test that converting tag sets to lists neither adds nor drops tags."""
    tags = frozenset({"a", "b", "c"})
    row = project_pbi(ProductBacklogItem(id="p1", tag_ids=tags))
    assert len(row.tag_ids) == len(tags)
    assert set(row.tag_ids) == tags


def test_done_column_pbis_before_bugs(pbis: list[ProductBacklogItem], bugs: list[Bug]) -> None:
    """Test that Done holds exactly the matching items, PBIs first."""
    rows = work_items_by_column(pbis, bugs, "Done")
    assert [(r.type, r.id) for r in rows] == [
        (WorkItemType.PBI, "p2"),
        (WorkItemType.PBI, "p3"),
        (WorkItemType.BUG, "b2"),
    ]


def test_aggregation_is_deterministic(pbis: list[ProductBacklogItem], bugs: list[Bug]) -> None:
    """Test that the same input always gives the same rows."""
    assert work_items_by_column(pbis, bugs, Column.DONE) == work_items_by_column(pbis, bugs, Column.DONE)


def test_duplicates_are_rendered_once() -> None:
    """Test that an ID listed twice appears once."""
    pbi = ProductBacklogItem(id="p1", state=PbiState.NEW)
    rows = work_items_by_column([pbi, pbi], [], Column.TO_DO)
    assert [r.id for r in rows] == ["p1"]


def test_soft_deleted_items_never_appear() -> None:
    """Test that deleted PBIs and bugs are excluded from every column."""
    pbis = [
        ProductBacklogItem(id=f"p{i}", state=state, is_deleted=i % 2 == 0)
        for i, state in enumerate(list(PbiState) * 3)
    ]
    bugs = [
        Bug(id=f"b{i}", status=status, is_deleted=i % 3 == 0)
        for i, status in enumerate(list(BugStatus) * 3)
    ]
    deleted = {p.id for p in pbis if p.is_deleted} | {b.id for b in bugs if b.is_deleted}

    columns = group_by_column(pbis, bugs)
    rendered = [row.id for rows in columns.values() for row in rows]

    assert deleted.isdisjoint(rendered)
    assert len(rendered) == len(pbis) + len(bugs) - len(deleted)


def test_group_by_column_keeps_display_order(pbis: list[ProductBacklogItem], bugs: list[Bug]) -> None:
    """Test that columns come back in display order."""
    columns = group_by_column(pbis, bugs)
    assert list(columns) == [Column.TO_DO, Column.IN_PROGRESS, Column.DONE]
    assert [r.id for r in columns[Column.TO_DO]] == ["p1"]
    assert [r.id for r in columns[Column.IN_PROGRESS]] == ["b1"]


@pytest.fixture
def service() -> WorkItemService:
    return WorkItemService(
        SimulatedDataSource(
            pbis=[
                ProductBacklogItem(id="1", description="Login", state=PbiState.NEW, assigned_user_id="u1"),
                ProductBacklogItem(id="2", description="Export", state=PbiState.ACTIVE, is_deleted=True),
            ],
            bugs=[
                Bug(id="1", description="Crash", status=BugStatus.ACTIVE, assigned_user_id="u2"),
                Bug(id="3", description="Typo", status=BugStatus.RESOLVED, assigned_user_id="u1"),
            ],
        )
    )


def test_service_lists_visible_rows(service: WorkItemService) -> None:
    """Test that the unified listing hides deleted items and lists PBIs first."""
    rows = service.get_all()
    assert [(row.type, row.id) for row in rows] == [
        (WorkItemType.PBI, "1"),
        (WorkItemType.BUG, "1"),
        (WorkItemType.BUG, "3"),
    ]


def test_service_get_by_id(service: WorkItemService) -> None:
    """Test lookup by ID with and without a type."""
    assert service.get_by_id("1").type is WorkItemType.PBI
    assert service.get_by_id("1", WorkItemType.BUG).title == "Crash"
    with pytest.raises(EntityNotFoundError):
        service.get_by_id("2")


def test_service_filters(service: WorkItemService) -> None:
    """Test the column and assignee listings."""
    assert [row.id for row in service.get_by_state("Done")] == ["3"]
    assert [(row.type, row.id) for row in service.get_by_assigned_user("u1")] == [
        (WorkItemType.PBI, "1"),
        (WorkItemType.BUG, "3"),
    ]


def test_service_update_state_routes_by_type(service: WorkItemService) -> None:
    """Test that column changes reach the endpoint of the item's type."""
    service.update_state("1", "In Progress", WorkItemType.PBI)
    service.update_state("1", Column.DONE, WorkItemType.BUG)

    assert service.get_by_id("1", WorkItemType.PBI).source_state is PbiState.ACTIVE
    assert service.get_by_id("1", WorkItemType.BUG).source_state is BugStatus.RESOLVED


def test_service_update_state_rejects_features(service: WorkItemService) -> None:
    """Test that features have no board state to update."""
    with pytest.raises(ValueError):
        service.update_state("f1", "Done", WorkItemType.FEATURE)
