"""Project, team and user services."""

from typing import Any

from agile_board.models import Project, Team, User
from agile_board.service import EntityService, is_deleted, parse_datetime


class ProjectService(EntityService[Project]):
    """Client for the /project endpoints."""

    resource = "project"
    entity_name = "project"

    def _parse(self, data: dict[str, Any]) -> Project:
        return Project(
            id=str(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            created_date=parse_datetime(data.get("createdDate")),
            updated_date=parse_datetime(data.get("updatedDate")),
            is_deleted=is_deleted(data),
        )

    def _serialize(self, entity: Project) -> dict[str, Any]:
        return {"id": entity.id, "name": entity.name, "description": entity.description}


class TeamService(EntityService[Team]):
    """Client for the /team endpoints."""

    resource = "team"
    entity_name = "team"

    def _parse(self, data: dict[str, Any]) -> Team:
        return Team(
            id=str(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            project_id=data.get("projectId") or None,
            created_date=parse_datetime(data.get("createdDate")),
            updated_date=parse_datetime(data.get("updatedDate")),
            is_deleted=is_deleted(data),
        )

    def _serialize(self, entity: Team) -> dict[str, Any]:
        return {
            "id": entity.id,
            "name": entity.name,
            "description": entity.description,
            "projectId": entity.project_id,
        }

    def get_by_project(self, project_id: str) -> list[Team]:
        return self._list("project", project_id, error_message=f"Failed to fetch teams for project: {project_id}")


class UserService(EntityService[User]):
    """Client for the /user endpoints."""

    resource = "user"
    entity_name = "user"

    def _parse(self, data: dict[str, Any]) -> User:
        return User(
            id=str(data["id"]),
            username=data.get("username") or "",
            email=data.get("email") or "",
            full_name=data.get("fullName") or "",
            avatar_url=data.get("avatarUrl") or None,
            created_date=parse_datetime(data.get("createdDate")),
            updated_date=parse_datetime(data.get("updatedDate")),
        )

    def _serialize(self, entity: User) -> dict[str, Any]:
        return {
            "id": entity.id,
            "username": entity.username,
            "email": entity.email,
            "fullName": entity.full_name,
            "avatarUrl": entity.avatar_url,
        }
