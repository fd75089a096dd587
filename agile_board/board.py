"""Kanban board: column rendering and the drag-and-drop move protocol."""

import threading
from dataclasses import replace
from enum import Enum

import structlog

from agile_board.columns import Column, map_to_bug_status, map_to_column, map_to_enum, parse_column
from agile_board.datasource import DataSource
from agile_board.errors import ServiceError
from agile_board.events import EventBus
from agile_board.models import Bug, ProductBacklogItem, WorkItemType
from agile_board.notifications import Notifier
from agile_board.workitems import BoardRow, WorkItemService, group_by_column, project, work_items_by_column

logger = structlog.get_logger()

MOVE_FAILED_MESSAGE = "Failed to update work item state"


class SyncState(Enum):
    """Relation between the board's collections and the server.

    CLEAN: collections match the last successful load or commit.
    OPTIMISTIC: a local move is applied and its write is in flight.
    RECONCILING: a write or load failed; the next read must reload first.
    """

    CLEAN = "clean"
    OPTIMISTIC = "optimistic"
    RECONCILING = "reconciling"


class MoveResult(Enum):
    MOVED = "moved"
    UNCHANGED = "unchanged"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class Board:
    """In-memory board of the PBIs and bugs of one sprint, user, or everything.

    The board subscribes to the event bus on construction so that moves made
    elsewhere reload it, and publishes after each of its own successful moves.
    Mutations are serialized by a lock: a second move waits until the first
    has settled.
    """

    def __init__(
        self,
        source: DataSource,
        bus: EventBus,
        notifier: Notifier,
        sprint_id: str | None = None,
        user_id: str | None = None,
    ) -> None:
        self.source = source
        self.work_items = WorkItemService(source)
        self.bus = bus
        self.notifier = notifier
        self.sprint_id = sprint_id
        self.user_id = user_id

        self.pbis: list[ProductBacklogItem] = []
        self.bugs: list[Bug] = []
        # Nothing fetched yet, so a load is mandatory.
        self.sync_state = SyncState.RECONCILING

        self._lock = threading.RLock()
        self._closed = False
        self._subscription = bus.subscribe(self._on_change)
        logger.debug("Board created", sprint_id=sprint_id, user_id=user_id, simulated=source.simulated)

    @property
    def simulated(self) -> bool:
        return self.source.simulated

    def close(self) -> None:
        """Stop listening for changes. Notifications after close are ignored."""
        self._closed = True
        self._subscription.dispose()
        logger.debug("Board closed")

    def _on_change(self) -> None:
        if self._closed:
            return
        try:
            self.load()
        except ServiceError as e:
            logger.warning("Board reload after change failed", error=e.message)

    def load(self) -> None:
        """Replace both collections with fresh data from the source.

        Raises:
            ServiceError: The source could not be read; the board stays RECONCILING
        """
        with self._lock:
            try:
                pbis, bugs = self.source.load_work_items(sprint_id=self.sprint_id, user_id=self.user_id)
            except ServiceError as e:
                self.sync_state = SyncState.RECONCILING
                self.notifier.error(f"Failed to load work items: {e.message}")
                raise

            self.pbis = list(pbis)
            self.bugs = list(bugs)
            self.sync_state = SyncState.CLEAN
            logger.info("Board loaded", pbis=len(self.pbis), bugs=len(self.bugs), simulated=self.simulated)

    def ensure_fresh(self) -> None:
        """Reload when the board is not known to match the server."""
        if self.sync_state is not SyncState.CLEAN:
            self.load()

    def items_in(self, column: Column | str) -> list[BoardRow]:
        """Rows of one column, PBIs first, soft-deleted items excluded."""
        with self._lock:
            return work_items_by_column(self.pbis, self.bugs, column)

    def columns(self) -> dict[Column, list[BoardRow]]:
        with self._lock:
            return group_by_column(self.pbis, self.bugs)

    def find(self, item_id: str, item_type: WorkItemType | str | None = None) -> BoardRow | None:
        """Return the visible row for an ID, or None."""
        with self._lock:
            found = self._locate(item_id, _parse_type(item_type))
            return project(found[2]) if found else None

    def _locate(
        self, item_id: str, item_type: WorkItemType | None
    ) -> tuple[WorkItemType, int, ProductBacklogItem | Bug] | None:
        # Without an explicit type a PBI wins over a bug with the same ID.
        if item_type in (None, WorkItemType.PBI):
            for index, pbi in enumerate(self.pbis):
                if pbi.id == item_id and not pbi.is_deleted:
                    return WorkItemType.PBI, index, pbi
        if item_type in (None, WorkItemType.BUG):
            for index, bug in enumerate(self.bugs):
                if bug.id == item_id and not bug.is_deleted:
                    return WorkItemType.BUG, index, bug
        return None

    def move_item(
        self,
        item_id: str,
        target_column: Column | str,
        item_type: WorkItemType | str | None = None,
    ) -> MoveResult:
        """Move a card to another column and persist the new state.

        The local collection is updated before the write. When the write
        fails the previous state is restored, an error toast is shown and the
        board reloads from the source.

        Args:
            item_id: ID of the PBI or bug
            target_column: Column the card is dropped on
            item_type: PBI or BUG; looked up in the loaded collections when omitted

        Returns:
            Outcome of the move
        """
        column = parse_column(target_column)
        kind = _parse_type(item_type)

        with self._lock:
            found = self._locate(item_id, kind)
            if found is None:
                logger.warning("Work item not on board, ignoring move", item_id=item_id, column=column.value)
                return MoveResult.NOT_FOUND

            kind, index, item = found
            current = map_to_column(item.state if isinstance(item, ProductBacklogItem) else item.status)
            if current is column:
                logger.info("Work item already in column", item_id=item_id, column=column.value)
                return MoveResult.UNCHANGED

            logger.info("Moving work item", item_id=item_id, type=kind.value, source=current.value, target=column.value)
            self.sync_state = SyncState.OPTIMISTIC
            try:
                if isinstance(item, ProductBacklogItem):
                    self.pbis[index] = replace(item, state=map_to_enum(column))
                else:
                    self.bugs[index] = replace(item, status=map_to_bug_status(column))
                self.work_items.update_state(item_id, column, kind)
            except ServiceError as e:
                self._rollback(kind, index, item)
                logger.error("Work item move failed", item_id=item_id, error=e.message)
                self.notifier.error(e.message or MOVE_FAILED_MESSAGE)
                self._reload_after_failure()
                return MoveResult.FAILED
            except Exception:
                # Programming errors propagate, but never leave the card in the wrong column.
                self._rollback(kind, index, item)
                logger.exception("Work item move crashed", item_id=item_id)
                raise

            self.sync_state = SyncState.CLEAN
            self.notifier.success(f"{_label(kind)} moved to {column.value}")

        self.bus.publish(exclude=self._subscription)
        return MoveResult.MOVED

    def _rollback(self, kind: WorkItemType, index: int, item: ProductBacklogItem | Bug) -> None:
        if kind is WorkItemType.PBI and isinstance(item, ProductBacklogItem):
            self.pbis[index] = item
        elif isinstance(item, Bug):
            self.bugs[index] = item
        self.sync_state = SyncState.RECONCILING

    def _reload_after_failure(self) -> None:
        try:
            self.load()
        except ServiceError as e:
            logger.error("Reload after failed move failed", error=e.message)


def _parse_type(item_type: WorkItemType | str | None) -> WorkItemType | None:
    if item_type is None or isinstance(item_type, WorkItemType):
        return item_type
    kind = WorkItemType.parse(item_type)
    if kind not in (WorkItemType.PBI, WorkItemType.BUG):
        raise ValueError(f"Only PBIs and bugs can be moved on the board, got {kind.value}")
    return kind


def _label(kind: WorkItemType) -> str:
    return "PBI" if kind is WorkItemType.PBI else "Bug"
