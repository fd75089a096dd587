"""CLI for agile board."""

from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from agile_board.board import Board, MoveResult
from agile_board.client import DEFAULT_TIMEOUT, GatewayClient
from agile_board.config import get_config
from agile_board.config_commands import config_app
from agile_board.datasource import DataSource, create_data_source
from agile_board.errors import ScopeNotSelectedError, ServiceError
from agile_board.events import EventBus
from agile_board.item_commands import bug_app, pbi_app
from agile_board.models import WorkItemType
from agile_board.notifications import Notifier, Toast
from agile_board.overview import summarize
from agile_board.planning_commands import project_app, sprint_app, team_app
from agile_board.select_commands import select_app
from agile_board.session import Session
from agile_board.workitems import BoardRow, WorkItemService

logger = structlog.get_logger()

app = App(
    help="Agile Board - backlog, sprints and the kanban board of an agile work-tracking gateway",
)

app.command(pbi_app)
app.command(bug_app)
app.command(sprint_app)
app.command(project_app)
app.command(team_app)
app.command(select_app)
app.command(config_app)

_TOAST_MARKERS = {"success": "✓", "error": "✗", "info": "i"}
_TYPE_LABELS = {
    WorkItemType.PBI: "PBI",
    WorkItemType.BUG: "Bug",
    WorkItemType.EPIC: "Epic",
    WorkItemType.FEATURE: "Feature",
}


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def print_toast(toast: Toast) -> None:
    print(f"{_TOAST_MARKERS.get(toast.level, '-')} {toast.message}")


def get_notifier() -> Notifier:
    return Notifier(sink=print_toast)


def get_client() -> GatewayClient:
    """Get a gateway client for the configured URL."""
    config = get_config()
    return GatewayClient(
        base_url=config.gateway_url(),
        timeout=float(config.get("gateway.timeout") or DEFAULT_TIMEOUT),
    )


def get_data_source() -> DataSource:
    """Get the configured data source."""
    return create_data_source(get_config())


def get_session() -> Session:
    return Session(get_config())


def require_team() -> str | None:
    """Return the selected team, or print how to select one and return None."""
    try:
        return get_session().require_team()
    except ScopeNotSelectedError as e:
        print(e)
        return None


def format_row(row: BoardRow) -> str:
    marker = "B" if row.type is WorkItemType.BUG else "P"
    detail = f" ({row.source_state.name.lower()})" if row.source_state is not None else ""
    return f"  [{marker}] {row.id}: {row.title} - priority {row.priority}, {row.story_point} pt{detail}"


@app.command
def board(sprint: str | None = None, user: str | None = None) -> None:
    """Show the kanban board of the selected team.

    Args:
        sprint: Only show work items of this sprint
        user: Only show work items assigned to this user
    """
    if require_team() is None:
        return

    work_board = Board(get_data_source(), EventBus(), get_notifier(), sprint_id=sprint, user_id=user)
    try:
        work_board.load()
    except ServiceError:
        return
    finally:
        work_board.close()

    if work_board.simulated:
        print("(simulated data)\n")
    for column, rows in work_board.columns().items():
        print(f"{column.value} ({len(rows)})")
        for row in rows:
            print(format_row(row))
        print()


@app.command
def move(
    item_id: str,
    column: str,
    type: Literal["pbi", "bug"] | None = None,
    sprint: str | None = None,
    user: str | None = None,
) -> None:
    """Move a work item to another board column.

    Args:
        item_id: PBI or bug ID
        column: Target column (todo, in-progress, done)
        type: Work item type, looked up on the board when omitted
        sprint: Sprint the board is scoped to
        user: User the board is scoped to
    """
    if require_team() is None:
        return

    work_board = Board(get_data_source(), EventBus(), get_notifier(), sprint_id=sprint, user_id=user)
    try:
        work_board.load()
        result = work_board.move_item(item_id, column, item_type=type)
    except ServiceError:
        return
    finally:
        work_board.close()

    if result is MoveResult.NOT_FOUND:
        print(f"Work item {item_id} is not on this board")
    elif result is MoveResult.UNCHANGED:
        print(f"Work item {item_id} is already in {column}")


@app.command
def show(item_id: str, type: Literal["pbi", "bug"] | None = None) -> None:
    """Show one card of the board.

    Args:
        item_id: PBI or bug ID
        type: Work item type; a PBI wins over a bug with the same ID when omitted
    """
    try:
        kind = WorkItemType.parse(type) if type else None
        row = WorkItemService(get_data_source()).get_by_id(item_id, kind)
    except ServiceError as e:
        get_notifier().error(e.message)
        return

    print(f"{_TYPE_LABELS[row.type]} {row.id}: {row.title}")
    print(f"Column: {row.column.value}")
    if row.source_state is not None:
        print(f"State: {row.source_state.value}")
    print(f"Priority: {row.priority}  Story points: {row.story_point}  Business value: {row.business_value}")
    if row.assigned_user_id:
        print(f"Assignee: {row.assigned_user_id}")
    if row.due_date:
        print(f"Due: {row.due_date}")
    if row.tag_ids:
        print(f"Tags: {', '.join(row.tag_ids)}")


@app.command
def overview(sprint: str | None = None, user: str | None = None) -> None:
    """Show completion and priority metrics.

    Args:
        sprint: Summarize this sprint
        user: Summarize the work items of this user
    """
    if require_team() is None:
        return

    notifier = get_notifier()
    try:
        dashboard = get_data_source().get_dashboard(sprint_id=sprint, user_id=user)
    except ServiceError as e:
        notifier.error(f"Failed to load dashboard: {e.message}")
        return

    summary = summarize(dashboard)
    if summary.simulated:
        print("(simulated data)\n")
    print(f"PBIs: {summary.total_pbis} ({summary.completion_percentage}% complete)")
    print(f"  To Do: {summary.to_do}  In Progress: {summary.in_progress}  Done: {summary.completed}")
    print(f"Story points: {summary.completed_story_points}/{summary.total_story_points}")
    print(f"Bugs: {summary.total_bugs} ({summary.resolved_bugs} resolved)")
    print(
        f"Priority: high {summary.high_priority}, medium {summary.medium_priority}, low {summary.low_priority}"
    )


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


def run() -> None:
    app.meta()


if __name__ == "__main__":
    run()
