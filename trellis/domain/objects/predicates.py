"""Pure predicates and combinators over trellis objects.

All functions in this module are pure - no I/O, no side effects.
They take data in, return data out.
"""

from collections.abc import Callable, Iterable, Mapping

from .models import (
    CLAIMABLE_STATUSES,
    TERMINAL_STATUSES,
    ObjectFilter,
    TrellisObject,
)

# =============================================================================
# Status Predicates
# =============================================================================


def is_closed(obj: TrellisObject) -> bool:
    """Check if an object reached a terminal status (DONE or CLOSED)."""
    return obj.status in TERMINAL_STATUSES


def is_open(obj: TrellisObject) -> bool:
    """Check if an object is not yet terminal."""
    return obj.status not in TERMINAL_STATUSES


def is_claimable(obj: TrellisObject) -> bool:
    """Check if an object may be claimed (DRAFT or OPEN)."""
    return obj.status in CLAIMABLE_STATUSES


# =============================================================================
# Hierarchy
# =============================================================================


def iter_ancestors(
    obj: TrellisObject,
    lookup: Callable[[str], TrellisObject | None],
) -> Iterable[TrellisObject]:
    """Yield the parent chain of an object, nearest first.

    Stops at a missing parent or when a cycle in ``parent`` links is
    detected.
    """
    seen = {obj.id}
    parent_id = obj.parent
    while parent_id and parent_id not in seen:
        seen.add(parent_id)
        parent = lookup(parent_id)
        if parent is None:
            return
        yield parent
        parent_id = parent.parent


def is_in_scope(
    obj: TrellisObject,
    scope: str | None,
    by_id: Mapping[str, TrellisObject],
) -> bool:
    """Check if an object is the scope object or one of its descendants."""
    if not scope or obj.id == scope:
        return True
    return any(ancestor.id == scope for ancestor in iter_ancestors(obj, by_id.get))


def children_of(parent_id: str, objects: Iterable[TrellisObject]) -> list[str]:
    """Ids of objects whose ``parent`` is ``parent_id``, sorted."""
    return sorted(obj.id for obj in objects if obj.parent == parent_id)


# =============================================================================
# Filtering and Ordering
# =============================================================================


def matches_filter(
    obj: TrellisObject,
    object_filter: ObjectFilter,
    by_id: Mapping[str, TrellisObject],
) -> bool:
    """Check one object against every criterion of a filter."""
    if not object_filter.include_closed and is_closed(obj):
        return False
    if object_filter.types and obj.type not in object_filter.types:
        return False
    if object_filter.statuses and obj.status not in object_filter.statuses:
        return False
    if object_filter.priorities and obj.priority not in object_filter.priorities:
        return False
    if object_filter.parent is not None and obj.parent != object_filter.parent:
        return False
    return is_in_scope(obj, object_filter.scope, by_id)


def filter_objects(
    objects: list[TrellisObject],
    object_filter: ObjectFilter | None,
) -> list[TrellisObject]:
    """Apply a filter to a full object set.

    The full set is needed so scope checks can follow parent links through
    objects that are themselves filtered out.
    """
    if object_filter is None:
        return list(objects)
    by_id = {obj.id: obj for obj in objects}
    return [obj for obj in objects if matches_filter(obj, object_filter, by_id)]


def sort_by_priority(objects: Iterable[TrellisObject]) -> list[TrellisObject]:
    """Sort objects HIGH first, keeping the input order within a priority."""
    return sorted(objects, key=lambda obj: obj.priority.rank)
