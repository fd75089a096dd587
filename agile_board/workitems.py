"""Board rows: projection of PBIs, bugs, features and epics, and unified work item access."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

import structlog

from agile_board.columns import Column, map_to_bug_status, map_to_column, map_to_enum, parse_column
from agile_board.datasource import DataSource
from agile_board.errors import EntityNotFoundError
from agile_board.models import Bug, BugStatus, Epic, Feature, PbiState, ProductBacklogItem, WorkItemType

logger = structlog.get_logger()

WorkItemSource = ProductBacklogItem | Bug | Feature | Epic


@dataclass(frozen=True)
class BoardRow:
    """Read-only display row for one backing PBI, bug, feature or epic.

    The row is discarded on every reload; the backing entity stays the source
    of truth. ``source_state`` keeps the underlying workflow value so that a
    Done row can still show whether the item was resolved or closed.
    """

    id: str
    type: WorkItemType
    column: Column
    title: str
    source_state: PbiState | BugStatus | None = None
    sprint_id: str | None = None
    area_id: str | None = None
    feature_id: str | None = None
    assigned_user_id: str | None = None
    description: str = ""
    functional_description: str = ""
    technical_description: str = ""
    priority: int = 0
    story_point: int = 0
    business_value: int = 0
    due_date: str = ""
    started_date: str = ""
    completed_date: str = ""
    is_deleted: bool = False
    tag_ids: tuple[str, ...] = ()

    @property
    def state(self) -> str:
        """Column label of the row."""
        return self.column.value

    @property
    def status(self) -> BugStatus | None:
        """Underlying bug status; None for every other row type."""
        if self.type is WorkItemType.BUG and isinstance(self.source_state, BugStatus):
            return self.source_state
        return None


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value else ""


def _title(text: str) -> str:
    return text.strip().splitlines()[0] if text.strip() else ""


def project_pbi(pbi: ProductBacklogItem) -> BoardRow:
    """Project a PBI into a board row."""
    return BoardRow(
        id=pbi.id,
        type=WorkItemType.PBI,
        column=map_to_column(pbi.state),
        title=_title(pbi.description),
        source_state=pbi.state,
        sprint_id=pbi.sprint_id,
        area_id=pbi.area_id,
        feature_id=pbi.feature_id,
        assigned_user_id=pbi.assigned_user_id,
        description=pbi.description,
        functional_description=pbi.functional_description,
        technical_description=pbi.technical_description,
        priority=pbi.priority,
        story_point=pbi.story_point,
        business_value=pbi.business_value,
        due_date=_iso(pbi.due_date),
        started_date=_iso(pbi.started_date),
        completed_date=_iso(pbi.completed_date),
        is_deleted=pbi.is_deleted,
        tag_ids=tuple(sorted(pbi.tag_ids)),
    )


def project_bug(bug: Bug) -> BoardRow:
    """Project a bug into a board row."""
    return BoardRow(
        id=bug.id,
        type=WorkItemType.BUG,
        column=map_to_column(bug.status),
        title=_title(bug.description),
        source_state=bug.status,
        sprint_id=bug.sprint_id,
        area_id=bug.area_id,
        feature_id=bug.feature_id,
        assigned_user_id=bug.assigned_user_id,
        description=bug.description,
        functional_description=bug.functional_description,
        technical_description=bug.technical_description,
        priority=bug.priority,
        story_point=bug.story_point,
        business_value=bug.business_value,
        due_date=_iso(bug.due_date),
        started_date=_iso(bug.started_date),
        completed_date=_iso(bug.completed_date),
        is_deleted=bug.is_deleted,
        tag_ids=tuple(sorted(bug.tag_ids)),
    )


def project_feature(feature: Feature) -> BoardRow:
    """Project a feature into a board row. Completed features are Done."""
    return BoardRow(
        id=feature.id,
        type=WorkItemType.FEATURE,
        column=Column.DONE if feature.is_completed else Column.TO_DO,
        title=feature.title,
        area_id=feature.area_id,
        description=feature.description,
        priority=feature.priority,
        is_deleted=feature.is_deleted,
    )


def project_epic(epic: Epic) -> BoardRow:
    """Project an epic into a board row."""
    return BoardRow(
        id=epic.id,
        type=WorkItemType.EPIC,
        column=Column.TO_DO,
        title=epic.title,
        area_id=epic.area_id,
        description=epic.description,
        priority=epic.priority,
        started_date=_iso(epic.start_date),
        due_date=_iso(epic.end_date),
        is_deleted=epic.is_deleted,
    )


def project(item: WorkItemSource) -> BoardRow:
    """Project any supported work item into a board row."""
    match item:
        case ProductBacklogItem():
            return project_pbi(item)
        case Bug():
            return project_bug(item)
        case Feature():
            return project_feature(item)
        case Epic():
            return project_epic(item)
    raise TypeError(f"Unsupported work item: {type(item).__name__}")


def board_rows(pbis: Iterable[ProductBacklogItem], bugs: Iterable[Bug]) -> list[BoardRow]:
    """Return the visible rows of every column, PBIs first.

    Soft-deleted items are excluded. Input order is preserved within each
    kind. An id seen twice in the same collection is only rendered once.
    """
    rows: list[BoardRow] = []
    seen: set[tuple[WorkItemType, str]] = set()

    for row in [project_pbi(p) for p in pbis if not p.is_deleted] + [project_bug(b) for b in bugs if not b.is_deleted]:
        key = (row.type, row.id)
        if key in seen:
            logger.debug("Skipping duplicate work item", item_id=row.id, type=row.type.value)
            continue
        seen.add(key)
        rows.append(row)

    return rows


def work_items_by_column(
    pbis: Iterable[ProductBacklogItem],
    bugs: Iterable[Bug],
    column: Column | str,
) -> list[BoardRow]:
    """Return the rows of one column, PBIs first, soft-deleted items excluded."""
    target = parse_column(column)
    return [row for row in board_rows(pbis, bugs) if row.column is target]


def group_by_column(pbis: Iterable[ProductBacklogItem], bugs: Iterable[Bug]) -> dict[Column, list[BoardRow]]:
    """Return the rows of every column, keyed in display order."""
    columns: dict[Column, list[BoardRow]] = {column: [] for column in Column}
    for row in board_rows(pbis, bugs):
        columns[row.column].append(row)
    return columns


class WorkItemService:
    """Unified read and state-change access to PBIs and bugs as board rows.

    Reads go through a data source, so the same calls serve live and
    simulated data. Rows are rebuilt on every call.
    """

    def __init__(self, source: DataSource) -> None:
        self.source = source

    def get_all(self, sprint_id: str | None = None, user_id: str | None = None) -> list[BoardRow]:
        pbis, bugs = self.source.load_work_items(sprint_id=sprint_id, user_id=user_id)
        return board_rows(pbis, bugs)

    def get_by_id(self, item_id: str, item_type: WorkItemType | None = None) -> BoardRow:
        """Return the visible row for an ID; a PBI wins over a bug with the same ID.

        Raises:
            EntityNotFoundError: No visible PBI or bug has this ID
        """
        for row in self.get_all():
            if row.id == item_id and item_type in (None, row.type):
                return row
        raise EntityNotFoundError("Work item not found")

    def get_by_state(self, column: Column | str) -> list[BoardRow]:
        pbis, bugs = self.source.load_work_items()
        return work_items_by_column(pbis, bugs, column)

    def get_by_assigned_user(self, user_id: str) -> list[BoardRow]:
        return self.get_all(user_id=user_id)

    def update_state(self, item_id: str, column: Column | str, item_type: WorkItemType) -> None:
        """Persist a column change through the state or status endpoint of the item's type."""
        target = parse_column(column)
        logger.info("Updating work item state", item_id=item_id, type=item_type.value, column=target.value)
        if item_type is WorkItemType.PBI:
            self.source.update_pbi_state(item_id, map_to_enum(target))
        elif item_type is WorkItemType.BUG:
            self.source.update_bug_status(item_id, map_to_bug_status(target))
        else:
            raise ValueError(f"Only PBIs and bugs have a board state, got {item_type.value}")
