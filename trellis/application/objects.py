"""Object service: create, read, update, delete and list trellis objects."""

import logging
from collections.abc import Iterable

from trellis.domain.objects import (
    TERMINAL_STATUSES,
    ObjectFilter,
    ObjectPriority,
    ObjectRepository,
    ObjectStatus,
    ObjectSummary,
    ObjectType,
    TrellisObject,
    generate_unique_id,
    is_open,
    utc_now,
)
from trellis.domain.shared import Err, Ok, Result, TrellisFailure
from trellis.domain.validation import validate_object_creation, validate_status_transition

logger = logging.getLogger(__name__)


def create_object(
    repository: ObjectRepository,
    object_type: ObjectType,
    title: str,
    parent: str | None = None,
    priority: ObjectPriority = ObjectPriority.MEDIUM,
    status: ObjectStatus = ObjectStatus.OPEN,
    prerequisites: Iterable[str] = (),
    body: str = "",
) -> Result[TrellisObject, TrellisFailure]:
    """Create and persist a new object.

    The id is derived from the title and made unique against every id in
    the repository.

    Args:
        repository: Object store.
        object_type: Kind of object to create.
        title: Human-readable title, also the source of the id.
        parent: Parent id; validated against the hierarchy rules.
        priority: Initial priority.
        status: Initial status.
        prerequisites: Ids that must be closed before this can start.
        body: Markdown body.

    Returns:
        Ok(created object), or Err(TrellisFailure) with kind
        INVALID_TITLE, PARENT_NOT_FOUND or INVALID_PARENT_TYPE.
    """
    existing_ids = [obj.id for obj in repository.get_objects()]
    try:
        object_id = generate_unique_id(title, object_type, existing_ids)
    except ValueError as e:
        return Err(TrellisFailure.invalid_title(title, str(e)))
    now = utc_now()

    candidate = TrellisObject(
        id=object_id,
        type=object_type,
        title=title,
        status=status,
        priority=priority,
        parent=parent,
        prerequisites=list(prerequisites),
        body=body,
        created=now,
        updated=now,
    )

    validated = validate_object_creation(candidate, repository)
    if isinstance(validated, Err):
        return validated

    repository.save_object(candidate)
    logger.info(f"Created {object_type.value} {object_id}")
    return Ok(candidate)


def get_object(
    repository: ObjectRepository,
    object_id: str,
) -> Result[TrellisObject, TrellisFailure]:
    """Load one object, or NOT_FOUND."""
    obj = repository.get_object_by_id(object_id)
    if obj is None:
        return Err(TrellisFailure.not_found(object_id))
    return Ok(obj)


def update_object(
    repository: ObjectRepository,
    object_id: str,
    priority: ObjectPriority | None = None,
    prerequisites: Iterable[str] | None = None,
    body: str | None = None,
    status: ObjectStatus | None = None,
    force: bool = False,
) -> Result[TrellisObject, TrellisFailure]:
    """Update selected fields of an object.

    Fields left as None are kept. A status change to IN_PROGRESS or DONE is
    refused while prerequisites are open, unless ``force`` is set.

    Returns:
        Ok(updated object), or Err(TrellisFailure) with kind NOT_FOUND or
        UNMET_PREREQUISITE.
    """
    with repository.lock(object_id):
        obj = repository.get_object_by_id(object_id)
        if obj is None:
            return Err(TrellisFailure.not_found(object_id))

        changes: dict[str, object] = {}
        if priority is not None:
            changes["priority"] = priority
        if prerequisites is not None:
            changes["prerequisites"] = list(dict.fromkeys(prerequisites))
        if body is not None:
            changes["body"] = body
        if status is not None:
            changes["status"] = status

        candidate = obj.touched(**changes)
        if status is not None and status != obj.status and not force:
            checked = validate_status_transition(candidate, repository)
            if isinstance(checked, Err):
                return checked

        repository.save_object(candidate)

    logger.info(f"Updated {object_id}: {', '.join(changes) or 'no fields'}")
    return Ok(candidate)


def delete_object(
    repository: ObjectRepository,
    object_id: str,
    force: bool = False,
) -> Result[TrellisObject, TrellisFailure]:
    """Delete an object.

    Refused with DEPENDENCY_CONFLICT while an open object lists it as a
    prerequisite, unless ``force`` is set.

    Returns:
        Ok(deleted object), or Err(TrellisFailure) with kind NOT_FOUND or
        DEPENDENCY_CONFLICT.
    """
    with repository.lock(object_id):
        obj = repository.get_object_by_id(object_id)
        if obj is None:
            return Err(TrellisFailure.not_found(object_id))

        if not force:
            dependents = [
                other.id
                for other in repository.get_objects()
                if other.id != object_id and is_open(other) and object_id in other.prerequisites
            ]
            if dependents:
                logger.debug(f"{object_id} is required by {', '.join(dependents)}")
                return Err(TrellisFailure.dependency_conflict(object_id))

        repository.delete_object(object_id)

    logger.info(f"Deleted {object_id}")
    return Ok(obj)


def list_objects(
    repository: ObjectRepository,
    types: Iterable[ObjectType] = (),
    statuses: Iterable[ObjectStatus] = (),
    priorities: Iterable[ObjectPriority] = (),
    scope: str | None = None,
    include_closed: bool = False,
) -> Result[list[ObjectSummary], TrellisFailure]:
    """List object summaries matching the given criteria.

    Closed objects are left out unless ``include_closed`` is set or a
    closed status is asked for explicitly.
    """
    statuses = list(statuses)
    object_filter = ObjectFilter(
        types=list(types),
        statuses=statuses,
        priorities=list(priorities),
        scope=scope,
        include_closed=include_closed or any(s in TERMINAL_STATUSES for s in statuses),
    )
    return Ok([ObjectSummary.from_object(obj) for obj in repository.get_objects(object_filter)])
