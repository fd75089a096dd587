"""Sprint service."""

from typing import Any

from agile_board.models import Sprint, SprintState
from agile_board.service import EntityService, format_datetime, parse_datetime


class SprintService(EntityService[Sprint]):
    """Client for the /sprint endpoints."""

    resource = "sprint"
    entity_name = "sprint"

    def _parse(self, data: dict[str, Any]) -> Sprint:
        return Sprint(
            id=str(data["id"]),
            name=data.get("name") or "",
            goal=data.get("goal") or "",
            state=SprintState.parse(data.get("state")),
            start_date=parse_datetime(data.get("startDate")),
            end_date=parse_datetime(data.get("endDate")),
            project_id=data.get("projectId") or None,
            team_id=data.get("teamId") or None,
        )

    def _serialize(self, entity: Sprint) -> dict[str, Any]:
        return {
            "id": entity.id,
            "name": entity.name,
            "goal": entity.goal,
            "state": entity.state.value,
            "startDate": format_datetime(entity.start_date),
            "endDate": format_datetime(entity.end_date),
            "projectId": entity.project_id,
            "teamId": entity.team_id,
        }

    def get_by_team(self, team_id: str) -> list[Sprint]:
        return self._list("team", team_id, error_message=f"Failed to fetch sprints for team: {team_id}")

    def get_by_project(self, project_id: str) -> list[Sprint]:
        return self._list("project", project_id, error_message=f"Failed to fetch sprints for project: {project_id}")
