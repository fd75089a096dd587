"""Tests for the selected project and team."""

from pathlib import Path

import pytest

from agile_board.config import Config
from agile_board.errors import ScopeNotSelectedError
from agile_board.session import Session


@pytest.fixture
def session(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Session:
    monkeypatch.setattr(Path, "home", lambda: tmp_path / "home")
    return Session(Config(config_dir=tmp_path / "local"))


def test_nothing_selected(session: Session) -> None:
    """Test that an empty session has no scope."""
    assert session.project_id is None
    assert session.team_id is None
    with pytest.raises(ScopeNotSelectedError, match="agile-board select team <team-id>"):
        session.require_team()
    with pytest.raises(ScopeNotSelectedError, match="No project selected"):
        session.require_project()


def test_select_team_with_project(session: Session) -> None:
    """Test selecting a team together with its project."""
    session.select_team("t1", "Core", project_id="p1")
    assert session.require_team() == "t1"
    assert session.team_name == "Core"
    assert session.require_project() == "p1"


def test_switching_project_clears_team(session: Session) -> None:
    """Test that a team does not survive a project switch."""
    session.select_team("t1", "Core", project_id="p1")

    session.select_project("p1")
    assert session.team_id == "t1"

    session.select_project("p2")
    assert session.project_id == "p2"
    assert session.team_id is None
    assert session.team_name is None


def test_selection_persists(tmp_path: Path, session: Session) -> None:
    """Test that the selection is stored in the config file."""
    session.select_team("t1", "Core")
    assert Session(Config(config_dir=tmp_path / "local")).team_id == "t1"


def test_numeric_ids_are_strings(session: Session) -> None:
    """Test that IDs stored as numbers are read back as strings."""
    session.config.set("session.team_id", 12)
    assert session.team_id == "12"


def test_clear(session: Session) -> None:
    """Test clearing the selection."""
    session.select_team("t1", "Core", project_id="p1")
    session.clear()
    assert session.project_id is None
    assert session.team_id is None
