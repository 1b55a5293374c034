"""Content and activity CLI commands.

Commands for editing object bodies and recording progress.
"""

from typing import Optional

import typer

from trellis.application import append_log, append_modified_files, replace_body
from trellis.interfaces.cli.common import (
    get_repository,
    parse_file_notes,
    parse_request,
    print_json,
    storage_errors,
    unwrap,
)
from trellis.interfaces.schemas import AppendFilesRequest, AppendLogRequest, ReplaceBodyRequest


def replace_body_cmd(
    ctx: typer.Context,
    object_id: str = typer.Argument(..., help="Object ID"),
    regex: str = typer.Argument(..., help="Regex pattern (dot matches newlines)"),
    replacement: str = typer.Argument(..., help="Replacement; $1, $<name>, $& and $$ expand"),
    allow_multiple: bool = typer.Option(
        False, "--all", "--allow-multiple-occurrences", help="Replace every match"
    ),
) -> None:
    """Replace text in an object body using a regex."""
    request = parse_request(
        ReplaceBodyRequest,
        id=object_id,
        regex=regex,
        replacement=replacement,
        allow_multiple_occurrences=allow_multiple,
    )
    repository = get_repository(ctx)
    with storage_errors():
        result = replace_body(
            repository,
            request.id,
            request.regex,
            request.replacement,
            allow_multiple_occurrences=request.allow_multiple_occurrences,
        )
    outcome = unwrap(result)
    print_json(
        {
            "id": outcome.object.id,
            "changed": outcome.changed,
            "matchCount": outcome.match_count,
            "message": outcome.message,
        }
    )


def append_log_cmd(
    ctx: typer.Context,
    object_id: str = typer.Argument(..., help="Object ID"),
    contents: str = typer.Argument(..., help="Log entry"),
) -> None:
    """Append an entry to an object's log."""
    request = parse_request(AppendLogRequest, id=object_id, contents=contents)
    repository = get_repository(ctx)
    with storage_errors():
        result = append_log(repository, request.id, request.contents)
    print_json(unwrap(result))


def append_files_cmd(
    ctx: typer.Context,
    object_id: str = typer.Argument(..., help="Object ID"),
    files: Optional[list[str]] = typer.Option(
        None, "--file", "-f", help="Changed file as PATH=NOTE (repeatable)"
    ),
) -> None:
    """Record files changed while working on an object."""
    request = parse_request(AppendFilesRequest, id=object_id, files_changed=parse_file_notes(files))
    repository = get_repository(ctx)
    with storage_errors():
        result = append_modified_files(repository, request.id, request.files_changed)
    print_json(unwrap(result))
