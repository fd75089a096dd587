"""Product backlog item service."""

from typing import Any

import structlog

from agile_board.models import PbiState, ProductBacklogItem
from agile_board.service import (
    EntityService,
    format_datetime,
    format_tags,
    is_deleted,
    parse_datetime,
    parse_tags,
)

logger = structlog.get_logger()


def pbi_from_json(data: dict[str, Any]) -> ProductBacklogItem:
    """Convert a gateway PBI object into a ProductBacklogItem.

    A missing state is read as NEW.
    """
    return ProductBacklogItem(
        id=str(data["id"]),
        description=data.get("description") or "",
        functional_description=data.get("functionalDescription") or "",
        technical_description=data.get("technicalDescription") or "",
        priority=int(data.get("priority") or 0),
        state=PbiState.parse(data.get("state")) or PbiState.NEW,
        story_point=int(data.get("storyPoint") or 0),
        business_value=int(data.get("businessValue") or 0),
        sprint_id=data.get("sprintId") or None,
        area_id=data.get("areaId") or None,
        feature_id=data.get("featureId") or None,
        assigned_user_id=data.get("assignedUserId") or None,
        due_date=parse_datetime(data.get("dueDate")),
        started_date=parse_datetime(data.get("startedDate")),
        completed_date=parse_datetime(data.get("completedDate")),
        tag_ids=parse_tags(data.get("tagIds")),
        is_deleted=is_deleted(data),
    )


def pbi_to_json(pbi: ProductBacklogItem) -> dict[str, Any]:
    """Build the create/update command payload for a PBI."""
    return {
        "id": pbi.id,
        "sprintId": pbi.sprint_id,
        "areaId": pbi.area_id,
        "featureId": pbi.feature_id,
        "assignedUserId": pbi.assigned_user_id,
        "description": pbi.description,
        "functionalDescription": pbi.functional_description,
        "technicalDescription": pbi.technical_description,
        "priority": pbi.priority,
        "state": (pbi.state or PbiState.NEW).value,
        "storyPoint": pbi.story_point,
        "businessValue": pbi.business_value,
        "dueDate": format_datetime(pbi.due_date),
        "startedDate": format_datetime(pbi.started_date),
        "completedDate": format_datetime(pbi.completed_date),
        "tagIds": format_tags(pbi.tag_ids),
    }


class PbiService(EntityService[ProductBacklogItem]):
    """Client for the /pbi endpoints."""

    resource = "pbi"
    entity_name = "PBI"

    def _parse(self, data: dict[str, Any]) -> ProductBacklogItem:
        return pbi_from_json(data)

    def _serialize(self, entity: ProductBacklogItem) -> dict[str, Any]:
        return pbi_to_json(entity)

    def get_by_user(self, user_id: str) -> list[ProductBacklogItem]:
        return self._list("user", user_id)

    def get_by_tag(self, tag_id: str) -> list[ProductBacklogItem]:
        return self._list("tag", tag_id)

    def get_by_feature(self, feature_id: str) -> list[ProductBacklogItem]:
        return self._list("feature", feature_id)

    def get_by_state(self, state: PbiState) -> list[ProductBacklogItem]:
        return self._list("state", state.value)

    def update_state(self, pbi_id: str, state: PbiState) -> None:
        """Change only the state of a PBI, leaving every other field untouched."""
        logger.info("Updating PBI state", entity_id=pbi_id, state=state.value)
        self.client.put(
            self._path("state"),
            json={"id": pbi_id, "state": state.value},
            error_message=f"Failed to update PBI state: {pbi_id}",
        )
