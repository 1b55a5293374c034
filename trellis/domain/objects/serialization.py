"""Markdown + YAML frontmatter codec for trellis objects.

Layout of a stored object:

    ---
    id: T-write-docs
    title: Write docs
    status: open
    ...
    ---

    <markdown body>
"""

import re
from typing import Any

import yaml
from pydantic import ValidationError

from .models import TrellisObject

# Frontmatter ends at the first line consisting solely of ---
_FRONTMATTER = re.compile(r"\A\s*---[ \t]*\n(.*?)^---[ \t]*$\n?(.*)\Z", re.DOTALL | re.MULTILINE)

REQUIRED_FIELDS = ("id", "title", "status", "priority", "schema")

FRONTMATTER_ORDER = (
    "id",
    "type",
    "title",
    "status",
    "priority",
    "parent",
    "prerequisites",
    "affectedFiles",
    "log",
    "schema",
    "childrenIds",
    "created",
    "updated",
)


def to_frontmatter(obj: TrellisObject) -> dict[str, Any]:
    """Build the frontmatter mapping (everything except the body)."""
    data = obj.model_dump(mode="json", by_alias=True, exclude={"body"})
    return {key: data[key] for key in FRONTMATTER_ORDER if key in data}


def to_markdown(obj: TrellisObject) -> str:
    """Serialize an object to markdown with YAML frontmatter."""
    yaml_str = yaml.safe_dump(
        to_frontmatter(obj),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return f"---\n{yaml_str.rstrip()}\n---\n\n{obj.body}"


def _string_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def from_markdown(content: str) -> TrellisObject:
    """Parse an object from markdown with YAML frontmatter.

    Raises:
        ValueError: If the frontmatter is missing, malformed, lacks a
            required field, or does not describe a valid object.
    """
    match = _FRONTMATTER.match(content)
    if match is None:
        raise ValueError("Invalid format: Expected YAML frontmatter delimited by --- markers")

    try:
        fm = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e

    if not isinstance(fm, dict):
        raise ValueError("Invalid frontmatter: Expected an object")

    for field in REQUIRED_FIELDS:
        if fm.get(field) is None:
            raise ValueError(f"Missing required field: {field}")
        if not isinstance(fm[field], str):
            raise ValueError(f"Invalid type for field {field}: Expected string")

    affected = fm.get("affectedFiles")
    data = {
        **fm,
        "prerequisites": _string_list(fm.get("prerequisites")),
        "log": _string_list(fm.get("log")),
        "childrenIds": _string_list(fm.get("childrenIds")),
        "affectedFiles": {
            str(path): note
            for path, note in (affected.items() if isinstance(affected, dict) else [])
            if isinstance(note, str)
        },
        # to_markdown puts one blank line between the closing --- and the body
        "body": match.group(2).removeprefix("\n"),
    }

    try:
        return TrellisObject.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid trellis object {fm['id']}: {e}") from e
