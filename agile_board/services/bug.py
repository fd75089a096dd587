"""Bug service."""

from typing import Any

import structlog

from agile_board.models import Bug, BugStatus
from agile_board.service import (
    EntityService,
    format_datetime,
    format_tags,
    is_deleted,
    parse_datetime,
    parse_tags,
)

logger = structlog.get_logger()


def bug_from_json(data: dict[str, Any]) -> Bug:
    """Convert a gateway bug object into a Bug."""
    return Bug(
        id=str(data["id"]),
        description=data.get("description") or "",
        functional_description=data.get("functionalDescription") or "",
        technical_description=data.get("technicalDescription") or "",
        priority=int(data.get("priority") or 0),
        status=BugStatus.parse(data.get("status")),
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
        is_no_bug=bool(data.get("isNoBug", False)),
        is_deleted=is_deleted(data),
    )


def bug_to_json(bug: Bug) -> dict[str, Any]:
    """Build the create/update command payload for a bug."""
    return {
        "id": bug.id,
        "sprintId": bug.sprint_id,
        "areaId": bug.area_id,
        "featureId": bug.feature_id,
        "assignedUserId": bug.assigned_user_id,
        "description": bug.description,
        "functionalDescription": bug.functional_description,
        "technicalDescription": bug.technical_description,
        "priority": bug.priority,
        "status": (bug.status or BugStatus.NEW).value,
        "storyPoint": bug.story_point,
        "businessValue": bug.business_value,
        "dueDate": format_datetime(bug.due_date),
        "startedDate": format_datetime(bug.started_date),
        "completedDate": format_datetime(bug.completed_date),
        "isNoBug": bug.is_no_bug,
        "tagIds": format_tags(bug.tag_ids),
    }


class BugService(EntityService[Bug]):
    """Client for the /bug endpoints."""

    resource = "bug"
    entity_name = "bug"

    def _parse(self, data: dict[str, Any]) -> Bug:
        return bug_from_json(data)

    def _serialize(self, entity: Bug) -> dict[str, Any]:
        return bug_to_json(entity)

    def get_by_user(self, user_id: str) -> list[Bug]:
        return self._list("user", user_id)

    def get_by_tag(self, tag_id: str) -> list[Bug]:
        return self._list("tag", tag_id)

    def get_by_feature(self, feature_id: str) -> list[Bug]:
        return self._list("feature", feature_id)

    def get_by_state(self, status: BugStatus) -> list[Bug]:
        return self._list("state", status.value)

    def update_status(self, bug_id: str, status: BugStatus) -> None:
        """Change only the status of a bug, leaving every other field untouched."""
        logger.info("Updating bug status", entity_id=bug_id, status=status.value)
        self.client.put(
            self._path("status"),
            json={"id": bug_id, "status": status.value},
            error_message=f"Failed to update bug status: {bug_id}",
        )
