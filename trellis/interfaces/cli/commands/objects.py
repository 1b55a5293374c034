"""Object management CLI commands.

Commands for creating, reading, updating, deleting and listing objects.
"""

from typing import Optional

import typer

from trellis.application import (
    create_object,
    delete_object,
    get_object,
    list_objects,
    update_object,
)
from trellis.domain.objects import ObjectPriority, ObjectStatus, ObjectType
from trellis.interfaces.cli.common import (
    get_repository,
    parse_request,
    print_json,
    storage_errors,
    unwrap,
)
from trellis.interfaces.schemas import (
    CreateObjectRequest,
    DeleteObjectRequest,
    GetObjectRequest,
    ListObjectsRequest,
    UpdateObjectRequest,
)


def create(
    ctx: typer.Context,
    object_type: ObjectType = typer.Argument(..., help="Kind of object"),
    title: str = typer.Argument(..., help="Title; the id is derived from it"),
    parent: Optional[str] = typer.Option(None, "--parent", help="Parent object ID"),
    priority: ObjectPriority = typer.Option(ObjectPriority.MEDIUM, "--priority"),
    status: ObjectStatus = typer.Option(ObjectStatus.OPEN, "--status"),
    prerequisites: Optional[list[str]] = typer.Option(
        None, "--prerequisite", "-r", help="Prerequisite ID (repeatable)"
    ),
    body: str = typer.Option("", "--body", help="Markdown body"),
) -> None:
    """Create a project, epic, feature or task."""
    request = parse_request(
        CreateObjectRequest,
        type=object_type,
        title=title,
        parent=parent,
        priority=priority,
        status=status,
        prerequisites=prerequisites or [],
        body=body,
    )
    repository = get_repository(ctx)
    with storage_errors():
        result = create_object(
            repository,
            request.type,
            request.title,
            parent=request.parent,
            priority=request.priority,
            status=request.status,
            prerequisites=request.prerequisites,
            body=request.body,
        )
    print_json(unwrap(result))


def get(
    ctx: typer.Context,
    object_id: str = typer.Argument(..., help="Object ID"),
) -> None:
    """Show one object."""
    request = parse_request(GetObjectRequest, id=object_id)
    repository = get_repository(ctx)
    with storage_errors():
        result = get_object(repository, request.id)
    print_json(unwrap(result))


def list_cmd(
    ctx: typer.Context,
    types: Optional[list[ObjectType]] = typer.Option(None, "--type", help="Kind (repeatable)"),
    statuses: Optional[list[ObjectStatus]] = typer.Option(
        None, "--status", help="Status (repeatable)"
    ),
    priorities: Optional[list[ObjectPriority]] = typer.Option(
        None, "--priority", help="Priority (repeatable)"
    ),
    scope: Optional[str] = typer.Option(None, "--scope", help="Limit to this object's subtree"),
    include_closed: bool = typer.Option(False, "--include-closed", help="Include closed objects"),
) -> None:
    """List object summaries."""
    request = parse_request(
        ListObjectsRequest,
        types=types or [],
        statuses=statuses or [],
        priorities=priorities or [],
        scope=scope,
        include_closed=include_closed,
    )
    repository = get_repository(ctx)
    with storage_errors():
        result = list_objects(
            repository,
            types=request.types,
            statuses=request.statuses,
            priorities=request.priorities,
            scope=request.scope,
            include_closed=request.include_closed,
        )
    print_json(unwrap(result))


def update(
    ctx: typer.Context,
    object_id: str = typer.Argument(..., help="Object ID"),
    priority: Optional[ObjectPriority] = typer.Option(None, "--priority"),
    status: Optional[ObjectStatus] = typer.Option(None, "--status"),
    prerequisites: Optional[list[str]] = typer.Option(
        None, "--prerequisite", "-r", help="Replace prerequisites (repeatable)"
    ),
    body: Optional[str] = typer.Option(None, "--body", help="Replace the body"),
    force: bool = typer.Option(False, "--force", help="Skip prerequisite checks"),
) -> None:
    """Update fields of an object."""
    request = parse_request(
        UpdateObjectRequest,
        id=object_id,
        priority=priority,
        status=status,
        prerequisites=prerequisites,
        body=body,
        force=force,
    )
    repository = get_repository(ctx)
    with storage_errors():
        result = update_object(
            repository,
            request.id,
            priority=request.priority,
            prerequisites=request.prerequisites,
            body=request.body,
            status=request.status,
            force=request.force,
        )
    print_json(unwrap(result))


def delete(
    ctx: typer.Context,
    object_id: str = typer.Argument(..., help="Object ID"),
    force: bool = typer.Option(False, "--force", help="Delete even if other objects need it"),
) -> None:
    """Delete an object."""
    request = parse_request(DeleteObjectRequest, id=object_id, force=force)
    repository = get_repository(ctx)
    with storage_errors():
        result = delete_object(repository, request.id, force=request.force)
    deleted = unwrap(result)
    print_json({"id": deleted.id, "deleted": True})
