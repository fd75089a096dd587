"""Mapping between work item workflow states and the three board columns."""

from enum import Enum

from agile_board.models import BugStatus, PbiState


class Column(Enum):
    """Visible kanban columns, in display order."""

    TO_DO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"

    def __str__(self) -> str:
        return self.value


_COLUMN_BY_STATE_NAME = {
    "NEW": Column.TO_DO,
    "ACTIVE": Column.IN_PROGRESS,
    "RESOLVED": Column.DONE,
    "CLOSED": Column.DONE,
}

_STATE_NAME_BY_COLUMN = {
    Column.TO_DO: "NEW",
    Column.IN_PROGRESS: "ACTIVE",
    # CLOSED is only reachable through a full update, never by dropping a card.
    Column.DONE: "RESOLVED",
}

_COLUMN_ALIASES = {
    "to do": Column.TO_DO,
    "todo": Column.TO_DO,
    "to-do": Column.TO_DO,
    "to_do": Column.TO_DO,
    "in progress": Column.IN_PROGRESS,
    "in-progress": Column.IN_PROGRESS,
    "in_progress": Column.IN_PROGRESS,
    "inprogress": Column.IN_PROGRESS,
    "doing": Column.IN_PROGRESS,
    "done": Column.DONE,
}


def map_to_column(state: PbiState | BugStatus | None) -> Column:
    """Return the board column for a PBI state or bug status.

    A missing state lands in To Do so that the item stays visible.
    """
    if state is None:
        return Column.TO_DO
    return _COLUMN_BY_STATE_NAME.get(state.name, Column.TO_DO)


def map_to_enum(column: Column | str) -> PbiState:
    """Return the PBI state a card takes when dropped on a column.

    Bugs share the encoding; use map_to_bug_status for a typed result.
    """
    return PbiState[_STATE_NAME_BY_COLUMN[parse_column(column)]]


def map_to_bug_status(column: Column | str) -> BugStatus:
    """Return the bug status a card takes when dropped on a column."""
    return BugStatus[_STATE_NAME_BY_COLUMN[parse_column(column)]]


def parse_column(value: Column | str) -> Column:
    """Parse a column label, accepting common command line spellings."""
    if isinstance(value, Column):
        return value
    column = _COLUMN_ALIASES.get(value.strip().lower())
    if column is None:
        valid = [c.value for c in Column]
        raise ValueError(f"Unknown column: '{value}'. Valid columns: {valid}")
    return column
