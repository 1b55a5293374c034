"""Trellis object domain - the entity, its conventions and the storage port.

All exports are pure (no I/O, no side effects) except for the repository
protocol, which only describes I/O.

Key Types:
    TrellisObject - The persisted work-tracking entity
    ObjectType / ObjectStatus / ObjectPriority - Enumerations
    ObjectSummary - Listing projection
    ObjectFilter - Bulk read criteria
    ObjectRepository - Storage port

Identifier Functions:
    extract_object_id / extract_object_ids - Location to id
    infer_object_type - Id prefix to kind
    generate_unique_id - Title to fresh id

Predicates:
    is_closed, is_open, is_claimable
    iter_ancestors, is_in_scope, children_of
    matches_filter, filter_objects, sort_by_priority

Serialization:
    to_markdown / from_markdown
"""

from .identifiers import (
    ID_PATTERN,
    extract_object_id,
    extract_object_ids,
    generate_unique_id,
    infer_object_type,
    is_object_id,
    slugify,
)
from .models import (
    CLAIMABLE_STATUSES,
    SCHEMA_VERSION,
    TERMINAL_STATUSES,
    ObjectFilter,
    ObjectPriority,
    ObjectStatus,
    ObjectSummary,
    ObjectType,
    TrellisObject,
    utc_now,
)
from .predicates import (
    children_of,
    filter_objects,
    is_claimable,
    is_closed,
    is_in_scope,
    is_open,
    iter_ancestors,
    matches_filter,
    sort_by_priority,
)
from .repository import ObjectRepository
from .serialization import from_markdown, to_markdown

__all__ = [
    # Models
    "TrellisObject",
    "ObjectType",
    "ObjectStatus",
    "ObjectPriority",
    "ObjectSummary",
    "ObjectFilter",
    "SCHEMA_VERSION",
    "TERMINAL_STATUSES",
    "CLAIMABLE_STATUSES",
    "utc_now",
    # Identifiers
    "ID_PATTERN",
    "extract_object_id",
    "extract_object_ids",
    "infer_object_type",
    "is_object_id",
    "generate_unique_id",
    "slugify",
    # Predicates
    "is_closed",
    "is_open",
    "is_claimable",
    "iter_ancestors",
    "is_in_scope",
    "children_of",
    "matches_filter",
    "filter_objects",
    "sort_by_priority",
    # Port
    "ObjectRepository",
    # Serialization
    "to_markdown",
    "from_markdown",
]
