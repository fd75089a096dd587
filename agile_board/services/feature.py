"""Feature service."""

from typing import Any

from agile_board.models import Feature
from agile_board.service import EntityService, is_deleted, parse_datetime


class FeatureService(EntityService[Feature]):
    """Client for the /feature endpoints."""

    resource = "feature"
    entity_name = "feature"
    exist_path = "isExist"

    def _parse(self, data: dict[str, Any]) -> Feature:
        return Feature(
            id=str(data["id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            area_id=data.get("areaId") or None,
            epic_id=data.get("epicId") or None,
            priority=int(data.get("priority") or 0),
            created_date=parse_datetime(data.get("createdDate")),
            updated_date=parse_datetime(data.get("updatedDate")),
            is_completed=bool(data.get("isCompleted", False)),
            is_deleted=is_deleted(data),
        )

    def _serialize(self, entity: Feature) -> dict[str, Any]:
        return {
            "id": entity.id,
            "title": entity.title,
            "description": entity.description,
            "areaId": entity.area_id,
            "epicId": entity.epic_id,
            "priority": entity.priority,
            "isCompleted": entity.is_completed,
        }

    def get_by_epic(self, epic_id: str) -> list[Feature]:
        return self._list("epic", epic_id)

    def get_by_area(self, area_id: str) -> list[Feature]:
        return self._list("area", area_id)
