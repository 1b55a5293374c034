"""Request schemas for the operations trellis exposes.

These Pydantic models are the input contract at the process boundary. They
reject malformed input (blank ids, unknown enum values, negative ages)
before any service is called. Field names accept both snake_case and the
camelCase spelling used in stored files (``allowMultipleOccurrences``,
``filesChanged``, ...).
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from trellis.domain.objects import ObjectPriority, ObjectStatus, ObjectType, slugify

ObjectId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class RequestModel(BaseModel):
    """Base for request schemas: camelCase aliases, no unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# =============================================================================
# Object Schemas
# =============================================================================


class CreateObjectRequest(RequestModel):
    """Request to create an object."""

    type: ObjectType
    title: NonBlank
    parent: Optional[ObjectId] = None
    priority: ObjectPriority = ObjectPriority.MEDIUM
    status: ObjectStatus = ObjectStatus.OPEN
    prerequisites: list[ObjectId] = Field(default_factory=list)
    body: str = ""

    @field_validator("title")
    @classmethod
    def _title_has_slug(cls, value: str) -> str:
        # The id is built from the title's ASCII letters and digits
        if not slugify(value):
            raise ValueError("Title must contain at least one letter or digit")
        return value


class GetObjectRequest(RequestModel):
    """Request to read one object."""

    id: ObjectId


class UpdateObjectRequest(RequestModel):
    """Request to update an object. Omitted fields are kept."""

    id: ObjectId
    priority: Optional[ObjectPriority] = None
    prerequisites: Optional[list[ObjectId]] = None
    body: Optional[str] = None
    status: Optional[ObjectStatus] = None
    force: bool = False


class DeleteObjectRequest(RequestModel):
    """Request to delete an object."""

    id: ObjectId
    force: bool = False


class ListObjectsRequest(RequestModel):
    """Request to list object summaries."""

    types: list[ObjectType] = Field(default_factory=list)
    statuses: list[ObjectStatus] = Field(default_factory=list)
    priorities: list[ObjectPriority] = Field(default_factory=list)
    scope: Optional[ObjectId] = None
    include_closed: bool = False


# =============================================================================
# Lifecycle Schemas
# =============================================================================


class ClaimTaskRequest(RequestModel):
    """Request to claim a task; the next available one when ``task_id`` is omitted."""

    task_id: Optional[ObjectId] = None
    scope: Optional[ObjectId] = None
    force: bool = False


class CompleteTaskRequest(RequestModel):
    """Request to complete an in-progress task."""

    task_id: ObjectId
    summary: str = ""
    files_changed: dict[NonBlank, str] = Field(default_factory=dict)
    # None defers to configuration
    auto_complete_parent: Optional[bool] = None


class NextIssueRequest(RequestModel):
    """Request for the next available issue."""

    scope: Optional[ObjectId] = None
    types: list[ObjectType] = Field(default_factory=list)


class PruneRequest(RequestModel):
    """Request to prune closed objects."""

    age_minutes: float = Field(default=0, ge=0)
    scope: Optional[ObjectId] = None


# =============================================================================
# Content and Activity Schemas
# =============================================================================


class ReplaceBodyRequest(RequestModel):
    """Request to apply a regex replacement to an object body."""

    id: ObjectId
    regex: str = Field(min_length=1)
    replacement: str
    allow_multiple_occurrences: bool = False


class AppendLogRequest(RequestModel):
    """Request to append a log entry."""

    id: ObjectId
    contents: str


class AppendFilesRequest(RequestModel):
    """Request to record modified files."""

    id: ObjectId
    files_changed: dict[NonBlank, str] = Field(min_length=1)
