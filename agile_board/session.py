"""Selected project and team, persisted between commands."""

import structlog

from agile_board.config import Config
from agile_board.errors import ScopeNotSelectedError

logger = structlog.get_logger()

PROJECT_ID_KEY = "session.project_id"
TEAM_ID_KEY = "session.team_id"
TEAM_NAME_KEY = "session.team_name"


class Session:
    """Ambient scope consulted by commands that list team or project data."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def _read(self, key: str) -> str | None:
        value = self.config.get(key)
        return str(value) if value not in (None, "") else None

    @property
    def project_id(self) -> str | None:
        return self._read(PROJECT_ID_KEY)

    @property
    def team_id(self) -> str | None:
        return self._read(TEAM_ID_KEY)

    @property
    def team_name(self) -> str | None:
        return self._read(TEAM_NAME_KEY)

    def select_project(self, project_id: str) -> None:
        """Select a project. A team from another project is cleared."""
        logger.info("Selecting project", project_id=project_id)
        if self.project_id != project_id:
            self.config.unset(TEAM_ID_KEY)
            self.config.unset(TEAM_NAME_KEY)
        self.config.set(PROJECT_ID_KEY, project_id)

    def select_team(self, team_id: str, team_name: str = "", project_id: str | None = None) -> None:
        logger.info("Selecting team", team_id=team_id, project_id=project_id)
        if project_id:
            self.config.set(PROJECT_ID_KEY, project_id)
        self.config.set(TEAM_ID_KEY, team_id)
        self.config.set(TEAM_NAME_KEY, team_name)

    def clear(self) -> None:
        logger.info("Clearing session")
        for key in (PROJECT_ID_KEY, TEAM_ID_KEY, TEAM_NAME_KEY):
            self.config.unset(key)

    def require_project(self) -> str:
        """Return the selected project ID or raise ScopeNotSelectedError."""
        if not self.project_id:
            raise ScopeNotSelectedError("project")
        return self.project_id

    def require_team(self) -> str:
        """Return the selected team ID or raise ScopeNotSelectedError."""
        if not self.team_id:
            raise ScopeNotSelectedError("team")
        return self.team_id
