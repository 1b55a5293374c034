"""Content mutation service.

Regex replacement over object bodies with a guard against accidental
multi-match edits. Patterns are compiled with DOTALL and MULTILINE, so ``.``
spans newlines and ``^``/``$`` anchor at line boundaries.

Replacement templates use dollar tokens rather than ``re``'s backslash
syntax:

    $1 .. $99   numbered group (unmatched group expands to "")
    $<name>     named group
    $&          whole match
    $$          literal dollar sign

Everything else, backslashes included, is copied literally.
"""

import logging
import re

from pydantic import BaseModel

from trellis.domain.objects import ObjectRepository, TrellisObject
from trellis.domain.shared import Err, Ok, Result, TrellisFailure

logger = logging.getLogger(__name__)

PATTERN_FLAGS = re.DOTALL | re.MULTILINE

_TOKEN = re.compile(r"\$(?:(\$)|(&)|(\d{1,2})|<([^>]*)>)")


class ReplaceResult(BaseModel):
    """Outcome of a text replacement."""

    text: str
    match_count: int
    changed: bool


class BodyReplacement(BaseModel):
    """Outcome of a body replacement on a stored object."""

    object: TrellisObject
    match_count: int
    changed: bool
    message: str


# =============================================================================
# Replacement Templates
# =============================================================================


def _group_or_empty(match: re.Match[str], group: int | str) -> str:
    value = match.group(group)
    return value if value is not None else ""


def expand_replacement(template: str, match: re.Match[str]) -> str:
    """Expand dollar tokens in ``template`` against one match.

    Tokens naming groups the pattern does not have stay literal. For a
    two-digit token that is out of range, the first digit is tried alone
    and the second is kept as text (``$10`` with one group is ``$1`` + "0").
    """
    group_count = match.re.groups

    def token(found: re.Match[str]) -> str:
        dollar, whole, number, name = found.groups()
        if dollar:
            return "$"
        if whole:
            return match.group(0)
        if number is not None:
            index = int(number)
            if 1 <= index <= group_count:
                return _group_or_empty(match, index)
            if len(number) == 2:
                first = int(number[0])
                if 1 <= first <= group_count:
                    return _group_or_empty(match, first) + number[1]
            return found.group(0)
        if name in match.re.groupindex:
            return _group_or_empty(match, name)
        return found.group(0)

    return _TOKEN.sub(token, template)


# =============================================================================
# Text Replacement
# =============================================================================


def replace_string_with_regex(
    text: str,
    pattern: str,
    replacement: str,
    allow_multiple_occurrences: bool = False,
) -> Result[ReplaceResult, TrellisFailure]:
    """Replace regex matches in a string.

    Matches are iterated lazily. Without ``allow_multiple_occurrences`` the
    iterator is only exhausted once a second match shows up, to report the
    exact count.

    Args:
        text: Input text.
        pattern: Regex pattern in Python ``re`` syntax.
        replacement: Replacement template with dollar tokens.
        allow_multiple_occurrences: Replace every match instead of failing
            when there is more than one.

    Returns:
        Ok(ReplaceResult) on success (unchanged text if nothing matched), or
        Err(TrellisFailure) with kind INVALID_PATTERN or MULTIPLE_MATCHES.
    """
    if not pattern:
        return Err(TrellisFailure.invalid_pattern(pattern, "Regex pattern cannot be empty"))

    try:
        compiled = re.compile(pattern, PATTERN_FLAGS)
    except re.error as e:
        return Err(TrellisFailure.invalid_pattern(pattern, str(e)))

    matches = compiled.finditer(text)
    if next(matches, None) is None:
        return Ok(ReplaceResult(text=text, match_count=0, changed=False))

    if not allow_multiple_occurrences and next(matches, None) is not None:
        count = 2 + sum(1 for _ in matches)
        return Err(TrellisFailure.multiple_matches(count, pattern))

    new_text, count = compiled.subn(lambda match: expand_replacement(replacement, match), text)
    return Ok(ReplaceResult(text=new_text, match_count=count, changed=new_text != text))


# =============================================================================
# Body Replacement
# =============================================================================


def replace_body(
    repository: ObjectRepository,
    object_id: str,
    pattern: str,
    replacement: str,
    allow_multiple_occurrences: bool = False,
) -> Result[BodyReplacement, TrellisFailure]:
    """Apply a regex replacement to a stored object's body.

    Runs under the object's lock. Nothing is written when the replacement
    fails or leaves the body as it was; otherwise only ``body`` and
    ``updated`` change.

    Args:
        repository: Object store.
        object_id: Object whose body to edit.
        pattern: Regex pattern.
        replacement: Replacement template.
        allow_multiple_occurrences: Replace every match.

    Returns:
        Ok(BodyReplacement), or Err(TrellisFailure) with kind NOT_FOUND,
        NO_CONTENT, INVALID_PATTERN or MULTIPLE_MATCHES.
    """
    with repository.lock(object_id):
        obj = repository.get_object_by_id(object_id)
        if obj is None:
            return Err(TrellisFailure.not_found(object_id))
        if not isinstance(obj.body, str) or not obj.body:
            return Err(TrellisFailure.no_content(object_id))

        result = replace_string_with_regex(
            obj.body, pattern, replacement, allow_multiple_occurrences
        )
        if isinstance(result, Err):
            return result
        outcome = result.value

        if not outcome.changed:
            if outcome.match_count == 0:
                message = (
                    f'No matches found for pattern "{pattern}" in object body. '
                    "Body remains unchanged."
                )
            else:
                message = "Replacement produced identical content. Body remains unchanged."
            return Ok(
                BodyReplacement(
                    object=obj, match_count=outcome.match_count, changed=False, message=message
                )
            )

        updated = obj.touched(body=outcome.text)
        repository.save_object(updated)

    logger.info(f"Replaced {outcome.match_count} match(es) in body of {object_id}")
    return Ok(
        BodyReplacement(
            object=updated,
            match_count=outcome.match_count,
            changed=True,
            message=(
                f'Successfully replaced content in object body using pattern "{pattern}". '
                f"Object ID: {object_id}"
            ),
        )
    )
