"""Data models for agile board."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class PbiState(Enum):
    """Workflow state of a product backlog item."""

    NEW = "NEW"
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"

    @classmethod
    def _missing_(cls, value: object) -> "PbiState | None":
        # Older gateway builds send IN_PROGRESS for ACTIVE
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized == "IN_PROGRESS":
                return cls.ACTIVE
            if normalized in cls.__members__:
                return cls[normalized]
        return None

    @classmethod
    def parse(cls, value: Any) -> "PbiState | None":
        """Parse a wire value, returning None for a missing state."""
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        return cls(value)


class BugStatus(Enum):
    """Workflow status of a bug. Uses the same encoding as PbiState."""

    NEW = "NEW"
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"

    @classmethod
    def _missing_(cls, value: object) -> "BugStatus | None":
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized == "IN_PROGRESS":
                return cls.ACTIVE
            if normalized in cls.__members__:
                return cls[normalized]
        return None

    @classmethod
    def parse(cls, value: Any) -> "BugStatus | None":
        """Parse a wire value, returning None for a missing status."""
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        return cls(value)


class SprintState(Enum):
    """Lifecycle state of a sprint.

    The gateway UI also uses a two-valued INACTIVE/ACTIVE enumeration, sent
    either by name or as the integers 0 and 1. Those values are folded into
    this enumeration when parsing: INACTIVE (0) is PLANNED, ACTIVE (1) is ACTIVE.
    """

    PLANNED = "PLANNED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value: Any) -> "SprintState":
        """Parse either sprint state enumeration into a SprintState."""
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.PLANNED
        if isinstance(value, bool):
            raise ValueError(f"Invalid sprint state: {value!r}")
        if isinstance(value, int):
            by_index = [cls.PLANNED, cls.ACTIVE, cls.COMPLETED, cls.CANCELLED]
            if 0 <= value < len(by_index):
                return by_index[value]
            raise ValueError(f"Invalid sprint state: {value!r}")
        normalized = str(value).strip().upper()
        if normalized == "INACTIVE":
            return cls.PLANNED
        if normalized.isdigit():
            return cls.parse(int(normalized))
        return cls(normalized)


class WorkItemType(Enum):
    """Discriminator for the kinds of work item rendered on boards."""

    PBI = "PBI"
    BUG = "BUG"
    EPIC = "EPIC"
    FEATURE = "FEATURE"

    @classmethod
    def parse(cls, value: str) -> "WorkItemType":
        """Parse a case-insensitive type name."""
        return cls(value.strip().upper())


@dataclass
class ProductBacklogItem:
    """Represents a product backlog item."""

    id: str
    description: str = ""
    functional_description: str = ""
    technical_description: str = ""
    priority: int = 0
    state: PbiState | None = PbiState.NEW
    story_point: int = 0
    business_value: int = 0
    sprint_id: str | None = None
    area_id: str | None = None
    feature_id: str | None = None
    assigned_user_id: str | None = None
    due_date: datetime | None = None
    started_date: datetime | None = None
    completed_date: datetime | None = None
    tag_ids: frozenset[str] = field(default_factory=frozenset)
    is_deleted: bool = False


@dataclass
class Bug:
    """Represents a bug."""

    id: str
    description: str = ""
    functional_description: str = ""
    technical_description: str = ""
    priority: int = 0
    status: BugStatus | None = BugStatus.NEW
    story_point: int = 0
    business_value: int = 0
    sprint_id: str | None = None
    area_id: str | None = None
    feature_id: str | None = None
    assigned_user_id: str | None = None
    due_date: datetime | None = None
    started_date: datetime | None = None
    completed_date: datetime | None = None
    tag_ids: frozenset[str] = field(default_factory=frozenset)
    is_no_bug: bool = False
    is_deleted: bool = False


@dataclass
class Epic:
    """Represents an epic."""

    id: str
    title: str
    description: str = ""
    area_id: str | None = None
    team_id: str | None = None
    priority: int = 0
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_date: datetime | None = None
    updated_date: datetime | None = None
    is_deleted: bool = False


@dataclass
class Feature:
    """Represents a feature."""

    id: str
    title: str
    description: str = ""
    area_id: str | None = None
    epic_id: str | None = None
    priority: int = 0
    created_date: datetime | None = None
    updated_date: datetime | None = None
    is_completed: bool = False
    is_deleted: bool = False


@dataclass
class Sprint:
    """Represents a sprint."""

    id: str
    name: str
    goal: str = ""
    state: SprintState = SprintState.PLANNED
    start_date: datetime | None = None
    end_date: datetime | None = None
    project_id: str | None = None
    team_id: str | None = None


@dataclass
class Project:
    """Represents a project."""

    id: str
    name: str
    description: str = ""
    created_date: datetime | None = None
    updated_date: datetime | None = None
    is_deleted: bool = False


@dataclass
class Team:
    """Represents a team within a project."""

    id: str
    name: str
    description: str = ""
    project_id: str | None = None
    created_date: datetime | None = None
    updated_date: datetime | None = None
    is_deleted: bool = False


@dataclass
class User:
    """Represents a user."""

    id: str
    username: str
    email: str = ""
    full_name: str = ""
    avatar_url: str | None = None
    created_date: datetime | None = None
    updated_date: datetime | None = None


@dataclass
class Dashboard:
    """Read-only aggregate of the PBIs and bugs of a sprint or user."""

    product_backlog_items: list[ProductBacklogItem] = field(default_factory=list)
    bugs: list[Bug] = field(default_factory=list)
    simulated: bool = False
