"""Identifier and path conventions.

Every markdown file whose name (without ``.md``) starts with ``P-``, ``E-``,
``F-`` or ``T-`` is a trellis object and that name is its id, whatever the
nesting depth:

    p/P-app/P-app.md                              -> P-app
    p/P-app/e/E-api/f/F-auth/t/open/T-login.md    -> T-login
    t/closed/T-fix-typo.md                        -> T-fix-typo

All functions in this module are pure.
"""

import re
from collections.abc import Iterable

from .models import ObjectType

ID_PATTERN = re.compile(r"^[PEFT]-")
MARKDOWN_SUFFIX = ".md"
MAX_SLUG_LENGTH = 30


def extract_object_id(location: str) -> str | None:
    """Derive the canonical id from a storage location.

    Args:
        location: File path using either separator style.

    Returns:
        The id, or None when the leaf name does not follow the convention.
    """
    leaf = location.replace("\\", "/").rsplit("/", 1)[-1]
    if leaf.endswith(MARKDOWN_SUFFIX):
        leaf = leaf[: -len(MARKDOWN_SUFFIX)]
    if not ID_PATTERN.match(leaf):
        return None
    return leaf


def extract_object_ids(locations: Iterable[str]) -> list[str]:
    """Extract ids from many locations.

    Locations that are not trellis objects are dropped. The result is
    deduplicated and sorted, independent of enumeration order.
    """
    ids = {object_id for object_id in map(extract_object_id, locations) if object_id}
    return sorted(ids)


def is_object_id(value: str) -> bool:
    """Check whether a string follows the id naming scheme."""
    return bool(ID_PATTERN.match(value))


def infer_object_type(object_id: str) -> ObjectType:
    """Infer the object kind from an id prefix.

    Raises:
        ValueError: If the id is empty or has an unknown prefix.
    """
    return ObjectType.from_id(object_id)


def slugify(text: str) -> str:
    """Convert a title into a lowercase, hyphen-separated slug.

    Example:
        slugify("Add User Authentication!")  # -> "add-user-authentication"
    """
    slug = text.lower().strip()
    # Keep word characters, whitespace and hyphens
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def truncate_slug(slug: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Shorten a slug, cutting at a hyphen when one sits late enough."""
    if len(slug) <= max_length:
        return slug
    truncated = slug[:max_length]
    last_hyphen = truncated.rfind("-")
    if last_hyphen > max_length * 0.6:
        return truncated[:last_hyphen]
    return truncated


def generate_unique_id(
    title: str,
    object_type: ObjectType,
    existing_ids: Iterable[str],
) -> str:
    """Generate an id for a new object from its title.

    Args:
        title: Human-readable title.
        object_type: Kind of the new object, selects the prefix.
        existing_ids: Ids already in use.

    Returns:
        ``<prefix><slug>``, suffixed with ``-1``, ``-2``, ... on collision.

    Raises:
        ValueError: If the title is blank or has no alphanumeric character.
    """
    if not title.strip():
        raise ValueError("Title cannot be empty")

    slug = truncate_slug(slugify(title))
    if not slug:
        raise ValueError("Title must contain at least one alphanumeric character")

    taken = set(existing_ids)
    candidate = f"{object_type.prefix}{slug}"
    counter = 1
    while candidate in taken:
        candidate = f"{object_type.prefix}{slug}-{counter}"
        counter += 1
    return candidate
