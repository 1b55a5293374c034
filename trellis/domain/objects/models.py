"""Trellis object domain models.

Pure pydantic models for the single persisted entity and its listing
projection. Objects are value snapshots: services derive the next state with
``model_copy`` and hand the whole object back to the repository.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SCHEMA_VERSION = "v1.0"


def utc_now() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


class ObjectType(str, Enum):
    """Kind of a trellis object, encoded in the id prefix."""

    PROJECT = "project"
    EPIC = "epic"
    FEATURE = "feature"
    TASK = "task"

    @property
    def prefix(self) -> str:
        """Id prefix for this kind, e.g. ``"T-"``."""
        return f"{self.value[0].upper()}-"

    @classmethod
    def from_id(cls, object_id: str) -> "ObjectType":
        """Infer the kind from the first character of an id.

        Raises:
            ValueError: If the id is empty or starts with an unknown letter.
        """
        if not object_id:
            raise ValueError("ID cannot be empty")
        first = object_id[0].upper()
        for object_type in cls:
            if object_type.prefix[0] == first:
                return object_type
        raise ValueError(f"Invalid ID format: '{object_id}'. ID must start with P, E, F, or T")


class ObjectStatus(str, Enum):
    """Lifecycle status of a trellis object."""

    DRAFT = "draft"
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    CLOSED = "closed"

    @classmethod
    def _missing_(cls, value: object) -> "ObjectStatus | None":
        # Files written by older tooling use "wont-do" for closed objects
        if value == "wont-do":
            return cls.CLOSED
        return None


TERMINAL_STATUSES = frozenset({ObjectStatus.DONE, ObjectStatus.CLOSED})
CLAIMABLE_STATUSES = frozenset({ObjectStatus.DRAFT, ObjectStatus.OPEN})


class ObjectPriority(str, Enum):
    """Advisory priority, used only for ordering."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 1, "medium": 2, "low": 3}[self.value]


class TrellisObject(BaseModel):
    """A project, epic, feature or task.

    The hierarchy's source of truth is each object's ``parent`` field;
    ``children_ids`` is a derived view filled in by the repository.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: ObjectType
    title: str
    status: ObjectStatus = ObjectStatus.OPEN
    priority: ObjectPriority = ObjectPriority.MEDIUM
    parent: str | None = None
    prerequisites: list[str] = Field(default_factory=list)
    affected_files: dict[str, str] = Field(default_factory=dict, alias="affectedFiles")
    log: list[str] = Field(default_factory=list)
    schema_version: str = Field(default=SCHEMA_VERSION, alias="schema")
    children_ids: list[str] = Field(default_factory=list, alias="childrenIds")
    created: datetime = Field(default_factory=utc_now)
    updated: datetime = Field(default_factory=utc_now)
    body: str = ""

    @model_validator(mode="before")
    @classmethod
    def _infer_type(cls, data: object) -> object:
        if isinstance(data, dict) and not data.get("type") and data.get("id"):
            data = {**data, "type": ObjectType.from_id(str(data["id"]))}
        return data

    @field_validator("parent", mode="before")
    @classmethod
    def _blank_parent_is_none(cls, value: object) -> object:
        if value == "":
            return None
        return value

    @field_validator("prerequisites")
    @classmethod
    def _dedupe_prerequisites(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("created", "updated")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _prefix_matches_type(self) -> "TrellisObject":
        # Stored ids always carry the upper-case prefix of their kind
        if not self.id.startswith(self.type.prefix):
            raise ValueError(
                f"ID '{self.id}' does not match type '{self.type.value}' "
                f"(expected prefix {self.type.prefix})"
            )
        return self

    @property
    def is_task(self) -> bool:
        return self.type == ObjectType.TASK

    def touched(self, **changes: object) -> "TrellisObject":
        """Return a copy with ``changes`` applied and ``updated`` bumped."""
        return self.model_copy(update={**changes, "updated": utc_now()}, deep=True)


class ObjectSummary(BaseModel):
    """Listing projection of a trellis object."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: ObjectType
    title: str
    status: ObjectStatus
    priority: ObjectPriority
    parent: str | None = None
    prerequisites: list[str] = Field(default_factory=list)
    children_ids: list[str] = Field(default_factory=list, alias="childrenIds")
    created: datetime
    updated: datetime

    @classmethod
    def from_object(cls, obj: TrellisObject) -> "ObjectSummary":
        return cls(
            id=obj.id,
            type=obj.type,
            title=obj.title,
            status=obj.status,
            priority=obj.priority,
            parent=obj.parent,
            prerequisites=list(obj.prerequisites),
            children_ids=list(obj.children_ids),
            created=obj.created,
            updated=obj.updated,
        )


class ObjectFilter(BaseModel):
    """Criteria for bulk reads through the repository port.

    Empty criteria match everything. ``scope`` keeps the scope object itself
    and all of its descendants.
    """

    types: list[ObjectType] = Field(default_factory=list)
    statuses: list[ObjectStatus] = Field(default_factory=list)
    priorities: list[ObjectPriority] = Field(default_factory=list)
    parent: str | None = None
    scope: str | None = None
    include_closed: bool = True
