"""Tests for state to column mapping."""

import pytest

from agile_board.columns import Column, map_to_bug_status, map_to_column, map_to_enum, parse_column
from agile_board.models import BugStatus, PbiState


@pytest.mark.parametrize(
    ("state", "expected"),
    [
        (PbiState.NEW, Column.TO_DO),
        (PbiState.ACTIVE, Column.IN_PROGRESS),
        (PbiState.RESOLVED, Column.DONE),
        (PbiState.CLOSED, Column.DONE),
        (BugStatus.NEW, Column.TO_DO),
        (BugStatus.ACTIVE, Column.IN_PROGRESS),
        (BugStatus.RESOLVED, Column.DONE),
        (BugStatus.CLOSED, Column.DONE),
        (None, Column.TO_DO),
    ],
)
def test_map_to_column(state: PbiState | BugStatus | None, expected: Column) -> None:
    """Test that every state, including a missing one, maps to a column."""
    assert map_to_column(state) is expected


def test_map_to_enum() -> None:
    """Test the column to state mapping used when a card is dropped."""
    assert map_to_enum(Column.TO_DO) is PbiState.NEW
    assert map_to_enum(Column.IN_PROGRESS) is PbiState.ACTIVE
    assert map_to_enum(Column.DONE) is PbiState.RESOLVED


def test_map_to_enum_never_produces_closed() -> None:
    """Test that dropping a card never closes it."""
    produced = {map_to_enum(column) for column in Column}
    assert PbiState.CLOSED not in produced
    assert {map_to_bug_status(column) for column in Column} == {
        BugStatus.NEW,
        BugStatus.ACTIVE,
        BugStatus.RESOLVED,
    }


def test_map_to_enum_accepts_labels() -> None:
    """Test that column labels are accepted as strings."""
    assert map_to_enum("Done") is PbiState.RESOLVED
    assert map_to_bug_status("In Progress") is BugStatus.ACTIVE


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("To Do", Column.TO_DO),
        ("todo", Column.TO_DO),
        ("in-progress", Column.IN_PROGRESS),
        ("IN PROGRESS", Column.IN_PROGRESS),
        ("done", Column.DONE),
    ],
)
def test_parse_column(text: str, expected: Column) -> None:
    """Test command line spellings of columns."""
    assert parse_column(text) is expected


def test_parse_column_rejects_unknown() -> None:
    """Test that an unknown column raises."""
    with pytest.raises(ValueError, match="Unknown column"):
        parse_column("Review")
