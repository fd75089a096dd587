"""Base class and wire helpers for entity services."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any, Generic, TypeVar

import structlog

from agile_board.client import GatewayClient
from agile_board.errors import ServiceError

logger = structlog.get_logger()

T = TypeVar("T")

UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from server"


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO timestamp from the gateway, tolerating empty values."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def parse_tags(value: Any) -> frozenset[str]:
    """Turn the transported tag list into a set."""
    if not value:
        return frozenset()
    return frozenset(str(tag) for tag in value)


def format_tags(tags: Iterable[str]) -> list[str]:
    """Turn a tag set into the sorted list sent over the wire."""
    return sorted(set(tags))


def is_deleted(data: dict[str, Any]) -> bool:
    """Read the soft-delete flag, which the gateway sends as deleted or isDeleted."""
    return bool(data.get("isDeleted") or data.get("deleted") or False)


def as_list(data: Any) -> list[dict[str, Any]]:
    """Normalize a listing response; a missing body is an empty list."""
    if data is None:
        return []
    if isinstance(data, list):
        return data
    raise ServiceError(UNEXPECTED_RESPONSE_MESSAGE)


def as_object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ServiceError(UNEXPECTED_RESPONSE_MESSAGE)
    return data


def convert(parse: Callable[[dict[str, Any]], T], data: Any) -> T:
    """Run a wire converter on one record.

    A record with a missing id, an unknown state or an unreadable date is
    reported as a ServiceError so that views show a message instead of crashing.
    """
    try:
        return parse(as_object(data))
    except (KeyError, ValueError, TypeError) as e:
        logger.error("Malformed record from gateway", error=str(e))
        raise ServiceError(UNEXPECTED_RESPONSE_MESSAGE) from e


class EntityService(ABC, Generic[T]):
    """Abstract base class for the per-entity REST services.

    Subclasses set ``resource`` and ``entity_name`` and implement the wire
    conversion in ``_parse`` and ``_serialize``.
    """

    resource: str = ""
    entity_name: str = "entity"
    exist_path: str = "exist"

    def __init__(self, client: GatewayClient) -> None:
        self.client = client

    @abstractmethod
    def _parse(self, data: dict[str, Any]) -> T:
        """Convert a gateway object into a model."""
        pass

    @abstractmethod
    def _serialize(self, entity: T) -> dict[str, Any]:
        """Convert a model into the gateway command payload."""
        pass

    def _path(self, *parts: str) -> str:
        return "/".join([f"/{self.resource}", *parts])

    def _list(self, *parts: str, error_message: str | None = None) -> list[T]:
        data = self.client.get(
            self._path(*parts), error_message=error_message or f"Failed to fetch {self.entity_name}s"
        )
        items = [convert(self._parse, item) for item in as_list(data)]
        logger.debug("Listed entities", resource=self.resource, path=self._path(*parts), count=len(items))
        return items

    def get_all(self) -> list[T]:
        """List every entity of this type."""
        logger.info("Listing entities", resource=self.resource)
        return self._list()

    def get_by_id(self, entity_id: str) -> T:
        """Fetch one entity by ID."""
        logger.info("Reading entity", resource=self.resource, entity_id=entity_id)
        data = self.client.get(
            self._path(entity_id), error_message=f"Failed to fetch {self.entity_name} with ID: {entity_id}"
        )
        return convert(self._parse, data)

    def is_exist(self, entity_id: str) -> bool:
        """Ask the gateway whether an entity exists."""
        data = self.client.get(
            self._path(self.exist_path, entity_id),
            error_message=f"Failed to check if {self.entity_name} exists: {entity_id}",
        )
        return bool(data)

    def create(self, entity: T) -> T | None:
        """Create an entity. The gateway assigns the ID.

        Returns:
            The created entity when the gateway echoes it back, otherwise None
        """
        payload = self._serialize(entity)
        payload.pop("id", None)
        logger.info("Creating entity", resource=self.resource)
        data = self.client.post(self._path(), json=payload, error_message=f"Failed to create {self.entity_name}")
        created = convert(self._parse, data) if isinstance(data, dict) else None
        logger.info("Entity created", resource=self.resource, entity_id=getattr(created, "id", None))
        return created

    def update(self, entity: T) -> T | None:
        """Replace an entity with a full update."""
        entity_id = getattr(entity, "id")
        logger.info("Updating entity", resource=self.resource, entity_id=entity_id)
        data = self.client.put(
            self._path(),
            json=self._serialize(entity),
            error_message=f"Failed to update {self.entity_name}: {entity_id}",
        )
        return convert(self._parse, data) if isinstance(data, dict) else None

    def delete(self, entity_id: str) -> None:
        """Soft delete an entity. The gateway flips its deleted flag."""
        logger.info("Deleting entity", resource=self.resource, entity_id=entity_id)
        self.client.delete(self._path(entity_id), error_message=f"Failed to delete {self.entity_name}: {entity_id}")
        logger.info("Entity deleted", resource=self.resource, entity_id=entity_id)
