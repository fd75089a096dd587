"""Backlog list of product backlog items with optimistic edits."""

import threading
from dataclasses import replace

import structlog

from agile_board.errors import ServiceError
from agile_board.events import EventBus
from agile_board.models import ProductBacklogItem
from agile_board.notifications import Notifier
from agile_board.services import PbiService

logger = structlog.get_logger()


class Backlog:
    """PBI list that keeps in step with the gateway and other views.

    Edits are applied locally first. A failed edit shows an error toast,
    reloads the list from the gateway and re-raises the error.
    """

    def __init__(self, pbis: PbiService, bus: EventBus, notifier: Notifier) -> None:
        self.service = pbis
        self.bus = bus
        self.notifier = notifier
        self._items: list[ProductBacklogItem] = []
        self.error: str | None = None
        self._lock = threading.RLock()
        self._closed = False
        self._subscription = bus.subscribe(self._on_change)

    @property
    def items(self) -> list[ProductBacklogItem]:
        """Visible PBIs: soft-deleted ones are never listed."""
        return [pbi for pbi in self._items if not pbi.is_deleted]

    def close(self) -> None:
        self._closed = True
        self._subscription.dispose()

    def _on_change(self) -> None:
        if self._closed:
            return
        try:
            self.refresh()
        except ServiceError as e:
            logger.warning("Backlog reload after change failed", error=e.message)

    def refresh(self) -> None:
        """Reload every PBI from the gateway."""
        with self._lock:
            self.error = None
            try:
                self._items = self.service.get_all()
            except ServiceError as e:
                self.error = e.message
                self.notifier.error(f"Failed to load PBIs: {e.message}")
                raise
            logger.info("Backlog refreshed", count=len(self._items))

    def search(self, term: str) -> list[ProductBacklogItem]:
        """Case-insensitive match on the description texts."""
        needle = term.strip().lower()
        if not needle:
            return self.items
        return [
            pbi
            for pbi in self.items
            if needle in pbi.description.lower()
            or needle in pbi.functional_description.lower()
            or needle in pbi.technical_description.lower()
        ]

    def _resync(self) -> None:
        try:
            self.refresh()
        except ServiceError as e:
            logger.error("Backlog resync failed", error=e.message)

    def update(self, pbi: ProductBacklogItem) -> None:
        """Replace a PBI locally, then send the full update."""
        with self._lock:
            self._items = [pbi if item.id == pbi.id else item for item in self._items]
            try:
                self.service.update(pbi)
            except ServiceError as e:
                self._resync()
                self.notifier.error(f"Failed to update PBI: {e.message}")
                raise
            self.notifier.success("PBI updated")
        self.bus.publish(exclude=self._subscription)

    def delete(self, pbi_id: str) -> None:
        """Hide a PBI locally, then ask the gateway to soft delete it."""
        with self._lock:
            self._items = [replace(item, is_deleted=True) if item.id == pbi_id else item for item in self._items]
            try:
                self.service.delete(pbi_id)
            except ServiceError as e:
                self._resync()
                self.notifier.error(f"Failed to delete PBI: {e.message}")
                raise
            self.notifier.success("PBI deleted")
        self.bus.publish(exclude=self._subscription)

    def create(self, pbi: ProductBacklogItem) -> None:
        """Create a PBI and refresh to pick up the ID the gateway assigned.

        Only a failed create is reported as such. A reload failing afterwards
        shows its own load error and leaves the created PBI in place.
        """
        with self._lock:
            try:
                self.service.create(pbi)
            except ServiceError as e:
                self.notifier.error(f"Failed to create PBI: {e.message}")
                raise
            self.notifier.success("PBI created")
            self._resync()
        self.bus.publish(exclude=self._subscription)
