"""Validation engine for trellis objects.

Structural checks run before an object is persisted. Each check returns a
Result; ``validate_object_creation`` sequences them and stops at the first
failure.

Hierarchy rules:
    - Projects cannot have parents
    - Epics must have a project as a parent
    - Features can have an epic as a parent or no parent
    - Tasks can have a feature as a parent or no parent
"""

from collections.abc import Callable

from trellis.domain.objects import (
    ObjectRepository,
    ObjectStatus,
    ObjectType,
    TrellisObject,
    is_closed,
    iter_ancestors,
)
from trellis.domain.shared import Err, Ok, Result, TrellisFailure, flat_map

# Legal parent kind per child kind; None means "no parent"
ALLOWED_PARENTS: dict[ObjectType, frozenset[ObjectType | None]] = {
    ObjectType.PROJECT: frozenset({None}),
    ObjectType.EPIC: frozenset({ObjectType.PROJECT}),
    ObjectType.FEATURE: frozenset({ObjectType.EPIC, None}),
    ObjectType.TASK: frozenset({ObjectType.FEATURE, None}),
}

_PARENT_RULES = {
    ObjectType.PROJECT: "Projects cannot have parents",
    ObjectType.EPIC: "Epics must have a project as a parent",
    ObjectType.FEATURE: "Features can only have an epic as a parent",
    ObjectType.TASK: "Tasks can only have a feature as a parent",
}


def validate_parent_exists(
    parent_id: str | None,
    repository: ObjectRepository,
) -> Result[None, TrellisFailure]:
    """Check that a referenced parent is present in the repository.

    An absent or empty parent id passes without touching the repository.
    """
    if not parent_id:
        return Ok(None)
    if repository.get_object_by_id(parent_id) is None:
        return Err(TrellisFailure.parent_not_found(parent_id))
    return Ok(None)


def validate_parent_type(
    object_type: ObjectType,
    parent_type: ObjectType | None,
) -> Result[None, TrellisFailure]:
    """Check that ``parent_type`` may contain ``object_type``."""
    if parent_type in ALLOWED_PARENTS[object_type]:
        return Ok(None)
    return Err(TrellisFailure.invalid_parent_type(_PARENT_RULES[object_type]))


def validate_object_creation(
    candidate: TrellisObject,
    repository: ObjectRepository,
) -> Result[TrellisObject, TrellisFailure]:
    """Run every structural check for a create or update.

    Args:
        candidate: The object about to be persisted.
        repository: Store used to resolve the parent.

    Returns:
        Ok(candidate) if every check passes, otherwise the first failure.
    """

    def check_parent_type(_: None) -> Result[None, TrellisFailure]:
        parent = repository.get_object_by_id(candidate.parent) if candidate.parent else None
        return validate_parent_type(candidate.type, parent.type if parent else None)

    result = flat_map(validate_parent_exists(candidate.parent, repository), check_parent_type)
    return flat_map(result, lambda _: Ok(candidate))


def find_blocking_prerequisite(
    obj: TrellisObject,
    lookup: Callable[[str], TrellisObject | None],
) -> str | None:
    """Return the first prerequisite id that is missing or not yet terminal.

    Prerequisites are checked left to right, so the answer is stable.
    """
    for prerequisite_id in obj.prerequisites:
        prerequisite = lookup(prerequisite_id)
        if prerequisite is None or not is_closed(prerequisite):
            return prerequisite_id
    return None


def find_blocking_ancestor_prerequisite(
    obj: TrellisObject,
    lookup: Callable[[str], TrellisObject | None],
) -> str | None:
    """Return the first unmet prerequisite anywhere up the parent chain."""
    for ancestor in iter_ancestors(obj, lookup):
        blocking = find_blocking_prerequisite(ancestor, lookup)
        if blocking is not None:
            return blocking
    return None


def validate_status_transition(
    candidate: TrellisObject,
    repository: ObjectRepository,
) -> Result[TrellisObject, TrellisFailure]:
    """Check that a new status is allowed by the object's prerequisites.

    Only moves to IN_PROGRESS or DONE are gated.
    """
    if candidate.status not in (ObjectStatus.IN_PROGRESS, ObjectStatus.DONE):
        return Ok(candidate)

    blocking = find_blocking_prerequisite(candidate, repository.get_object_by_id)
    if blocking is not None:
        return Err(
            TrellisFailure.unmet_prerequisite(
                blocking,
                f"Cannot update status to '{candidate.status.value}' - prerequisites are "
                f"not complete (blocked by {blocking}). Use force=true to override.",
            )
        )
    return Ok(candidate)
