"""Typed failures returned by core operations.

A ``TrellisFailure`` pairs a structured discriminator (``kind``) with a
stable, human-readable message, so callers can branch on the kind and render
the message without parsing it.

``StorageError`` is the one failure that is raised rather than returned: it
wraps I/O, permission and corruption faults coming out of a repository
adapter and keeps the original exception as ``__cause__``.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Discriminator for every expected failure."""

    NOT_FOUND = "not-found"
    PARENT_NOT_FOUND = "parent-not-found"
    INVALID_PARENT_TYPE = "invalid-parent-type"
    INVALID_TITLE = "invalid-title"
    INVALID_TRANSITION = "invalid-transition"
    UNMET_PREREQUISITE = "unmet-prerequisite"
    INVALID_PATTERN = "invalid-pattern"
    MULTIPLE_MATCHES = "multiple-matches"
    NO_CONTENT = "no-content"
    DEPENDENCY_CONFLICT = "dependency-conflict"


# Kinds produced by the validation engine
VALIDATION_KINDS = frozenset(
    {ErrorKind.PARENT_NOT_FOUND, ErrorKind.INVALID_PARENT_TYPE, ErrorKind.INVALID_TITLE}
)


class StorageError(Exception):
    """A repository adapter could not read, write or delete an object."""


@dataclass(frozen=True)
class TrellisFailure:
    """An expected, recoverable failure of a core operation.

    Attributes:
        kind: Structured discriminator.
        message: Human-readable form, stable per kind.
        field: Offending field name for validation failures.
        object_id: The id the failure is about (missing object, blocking
            prerequisite, ...).
        match_count: Exact number of matches for MULTIPLE_MATCHES.
        pattern: The caller's pattern text for pattern failures.
    """

    kind: ErrorKind
    message: str
    field: str | None = None
    object_id: str | None = None
    match_count: int | None = None
    pattern: str | None = None

    @property
    def is_validation_failure(self) -> bool:
        return self.kind in VALIDATION_KINDS

    def __str__(self) -> str:
        return self.message

    @classmethod
    def not_found(cls, object_id: str, noun: str = "Object") -> "TrellisFailure":
        return cls(
            kind=ErrorKind.NOT_FOUND,
            message=f"{noun} with ID '{object_id}' not found",
            object_id=object_id,
        )

    @classmethod
    def parent_not_found(cls, parent_id: str) -> "TrellisFailure":
        return cls(
            kind=ErrorKind.PARENT_NOT_FOUND,
            message=f"Parent object with ID '{parent_id}' does not exist",
            field="parent",
            object_id=parent_id,
        )

    @classmethod
    def invalid_parent_type(cls, message: str, field: str = "parent") -> "TrellisFailure":
        return cls(kind=ErrorKind.INVALID_PARENT_TYPE, message=message, field=field)

    @classmethod
    def invalid_title(cls, title: str, message: str) -> "TrellisFailure":
        return cls(kind=ErrorKind.INVALID_TITLE, message=f"{message}: '{title}'", field="title")

    @classmethod
    def invalid_transition(cls, object_id: str, message: str) -> "TrellisFailure":
        return cls(kind=ErrorKind.INVALID_TRANSITION, message=message, object_id=object_id)

    @classmethod
    def unmet_prerequisite(cls, blocking_id: str, message: str) -> "TrellisFailure":
        return cls(kind=ErrorKind.UNMET_PREREQUISITE, message=message, object_id=blocking_id)

    @classmethod
    def invalid_pattern(cls, pattern: str, diagnostic: str) -> "TrellisFailure":
        return cls(
            kind=ErrorKind.INVALID_PATTERN,
            message=f"Invalid regex pattern: {diagnostic}",
            pattern=pattern,
        )

    @classmethod
    def multiple_matches(cls, match_count: int, pattern: str) -> "TrellisFailure":
        return cls(
            kind=ErrorKind.MULTIPLE_MATCHES,
            message=(
                f'Found {match_count} matches for pattern "{pattern}" but '
                "allowMultipleOccurrences is false. Use allowMultipleOccurrences: true "
                "to replace all matches, or provide a more specific regex."
            ),
            match_count=match_count,
            pattern=pattern,
        )

    @classmethod
    def no_content(cls, object_id: str) -> "TrellisFailure":
        return cls(
            kind=ErrorKind.NO_CONTENT,
            message=f"Object with ID '{object_id}' has no body content to replace",
            object_id=object_id,
        )

    @classmethod
    def dependency_conflict(cls, object_id: str) -> "TrellisFailure":
        return cls(
            kind=ErrorKind.DEPENDENCY_CONFLICT,
            message=(
                f"Cannot delete object {object_id} because it is required by other "
                "objects. Use force=true to override."
            ),
            object_id=object_id,
        )
