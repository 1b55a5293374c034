"""Task lifecycle CLI commands.

Commands for claiming and completing tasks, picking the next available
issue and pruning closed objects.
"""

from typing import Optional

import typer

from trellis.application import (
    claim_next_task,
    claim_task,
    complete_task,
    get_next_available_issue,
    prune_closed,
)
from trellis.domain.objects import ObjectType
from trellis.interfaces.cli.common import (
    get_config,
    get_repository,
    parse_file_notes,
    parse_request,
    print_json,
    storage_errors,
    unwrap,
)
from trellis.interfaces.schemas import (
    ClaimTaskRequest,
    CompleteTaskRequest,
    NextIssueRequest,
    PruneRequest,
)


def claim(
    ctx: typer.Context,
    task_id: Optional[str] = typer.Argument(
        None, help="Task ID (default: next available task)"
    ),
    scope: Optional[str] = typer.Option(
        None, "--scope", help="Pick from this object's subtree when no ID is given"
    ),
    force: bool = typer.Option(False, "--force", help="Skip status and prerequisite checks"),
) -> None:
    """Claim a task and mark it in progress."""
    request = parse_request(ClaimTaskRequest, task_id=task_id, scope=scope, force=force)
    repository = get_repository(ctx)
    with storage_errors():
        if request.task_id:
            result = claim_task(repository, request.task_id, force=request.force)
        else:
            result = claim_next_task(repository, scope=request.scope)
    print_json(unwrap(result))


def complete(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
    summary: str = typer.Option("", "--summary", "-s", help="Log entry for the completion"),
    files: Optional[list[str]] = typer.Option(
        None, "--file", "-f", help="Changed file as PATH=NOTE (repeatable)"
    ),
    auto_complete_parent: Optional[bool] = typer.Option(
        None,
        "--auto-complete-parent/--no-auto-complete-parent",
        help="Complete parents whose children are all closed (default from config)",
    ),
) -> None:
    """Complete an in-progress task."""
    request = parse_request(
        CompleteTaskRequest,
        task_id=task_id,
        summary=summary,
        files_changed=parse_file_notes(files),
        auto_complete_parent=auto_complete_parent,
    )
    if request.auto_complete_parent is None:
        cascade = get_config(ctx).auto_complete_parent
    else:
        cascade = request.auto_complete_parent

    repository = get_repository(ctx)
    with storage_errors():
        result = complete_task(
            repository,
            request.task_id,
            summary=request.summary,
            files_changed=request.files_changed,
            auto_complete_parent=cascade,
        )
    print_json(unwrap(result))


def next_issue(
    ctx: typer.Context,
    scope: Optional[str] = typer.Option(None, "--scope", help="Limit to this object's subtree"),
    types: Optional[list[ObjectType]] = typer.Option(None, "--type", help="Kind (repeatable)"),
) -> None:
    """Show the highest priority issue that is ready to start."""
    request = parse_request(NextIssueRequest, scope=scope, types=types or [])
    repository = get_repository(ctx)
    with storage_errors():
        result = get_next_available_issue(repository, scope=request.scope, types=request.types)
    print_json(unwrap(result))


def prune(
    ctx: typer.Context,
    age_minutes: float = typer.Option(
        0, "--age-minutes", help="Only prune objects closed at least this long ago"
    ),
    scope: Optional[str] = typer.Option(None, "--scope", help="Limit to this object's subtree"),
) -> None:
    """Delete closed objects that nothing depends on."""
    request = parse_request(PruneRequest, age_minutes=age_minutes, scope=scope)
    repository = get_repository(ctx)
    with storage_errors():
        result = prune_closed(repository, age_minutes=request.age_minutes, scope=request.scope)
    print_json(unwrap(result))
