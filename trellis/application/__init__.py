"""Application service layer for trellis.

Services combine domain functions with the repository port. Each one
returns a Result; storage faults propagate as exceptions.

Services:
    objects - Create, read, update, delete and list
    lifecycle - Claim, complete, next available issue, prune
    content - Regex body replacement
    activity - Log entries and modified-file notes

Example usage:
    >>> from trellis.application import claim_task
    >>> from trellis.domain.shared import is_ok
    >>>
    >>> result = claim_task(repository, "T-write-docs")
    >>> if is_ok(result):
    ...     print(f"Claimed: {result.value.title}")
"""

from trellis.application.activity import (
    FilesAppendResult,
    LogAppendResult,
    append_log,
    append_modified_files,
    merge_affected_files,
)
from trellis.application.content import (
    BodyReplacement,
    ReplaceResult,
    expand_replacement,
    replace_body,
    replace_string_with_regex,
)
from trellis.application.lifecycle import (
    PruneFailure,
    PruneReport,
    claim_next_task,
    claim_task,
    complete_task,
    get_next_available_issue,
    list_available_issues,
    prune_closed,
)
from trellis.application.objects import (
    create_object,
    delete_object,
    get_object,
    list_objects,
    update_object,
)

__all__ = [
    # Object service
    "create_object",
    "get_object",
    "update_object",
    "delete_object",
    "list_objects",
    # Lifecycle service
    "claim_task",
    "claim_next_task",
    "complete_task",
    "get_next_available_issue",
    "list_available_issues",
    "prune_closed",
    "PruneReport",
    "PruneFailure",
    # Content service
    "replace_string_with_regex",
    "replace_body",
    "expand_replacement",
    "ReplaceResult",
    "BodyReplacement",
    # Activity service
    "append_log",
    "append_modified_files",
    "merge_affected_files",
    "LogAppendResult",
    "FilesAppendResult",
]
