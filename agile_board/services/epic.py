"""Epic service."""

from typing import Any

from agile_board.models import Epic
from agile_board.service import EntityService, format_datetime, is_deleted, parse_datetime


class EpicService(EntityService[Epic]):
    """Client for the /epic endpoints."""

    resource = "epic"
    entity_name = "epic"
    exist_path = "isExist"

    def _parse(self, data: dict[str, Any]) -> Epic:
        return Epic(
            id=str(data["id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            area_id=data.get("areaId") or None,
            team_id=data.get("teamId") or None,
            priority=int(data.get("priority") or 0),
            start_date=parse_datetime(data.get("startDate")),
            end_date=parse_datetime(data.get("endDate")),
            created_date=parse_datetime(data.get("createdDate")),
            updated_date=parse_datetime(data.get("updatedDate")),
            is_deleted=is_deleted(data),
        )

    def _serialize(self, entity: Epic) -> dict[str, Any]:
        return {
            "id": entity.id,
            "title": entity.title,
            "description": entity.description,
            "areaId": entity.area_id,
            "teamId": entity.team_id,
            "priority": entity.priority,
            "startDate": format_datetime(entity.start_date),
            "endDate": format_datetime(entity.end_date),
        }

    def get_by_team(self, team_id: str) -> list[Epic]:
        return self._list("team", team_id)

    def get_by_area(self, area_id: str) -> list[Epic]:
        return self._list("area", area_id)
