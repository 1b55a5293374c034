"""Shared utilities for trellis CLI commands.

This module provides common utilities used across CLI commands:
- Repository access from the command context
- Request validation and result unwrapping
- Formatted output helpers (error, success, JSON)
"""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Optional, TypeVar

import typer
from pydantic import BaseModel, ValidationError

from trellis.config import TrellisConfig, open_repository
from trellis.domain.shared import Err, Result, StorageError, TrellisFailure
from trellis.infrastructure import LocalRepository, LockTimeout

T = TypeVar("T")
RequestT = TypeVar("RequestT", bound=BaseModel)


# =============================================================================
# Output
# =============================================================================


def print_error(msg: str) -> None:
    """Print a formatted error message to stderr.

    Args:
        msg: Error message to display
    """
    typer.echo(typer.style(f"Error: {msg}", fg=typer.colors.RED), err=True)


def print_json(data: Any) -> None:
    """Print data as indented JSON.

    Pydantic models are dumped in JSON mode with their aliases, so objects
    print with the same field names they are stored with.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, list):
        data = [
            item.model_dump(mode="json", by_alias=True) if isinstance(item, BaseModel) else item
            for item in data
        ]
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


# =============================================================================
# Context and Validation
# =============================================================================


def get_config(ctx: typer.Context) -> TrellisConfig:
    """Return the configuration resolved by the app callback."""
    config = ctx.obj
    if not isinstance(config, TrellisConfig):
        config = TrellisConfig()
    return config


def get_repository(ctx: typer.Context) -> LocalRepository:
    """Open the repository for the current command."""
    with storage_errors():
        return open_repository(get_config(ctx))


def parse_request(model: type[RequestT], **values: Any) -> RequestT:
    """Validate command input against a request schema.

    Raises:
        typer.Exit: With code 1 if the input is rejected.
    """
    try:
        return model.model_validate(values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'input'}: {error['msg']}"
            for error in e.errors()
        )
        print_error(f"Invalid input: {problems}")
        raise typer.Exit(1) from e


def parse_file_notes(values: Optional[list[str]]) -> dict[str, str]:
    """Parse repeated ``path=note`` options into a mapping.

    Raises:
        typer.BadParameter: If an entry has no ``=``.
    """
    notes: dict[str, str] = {}
    for value in values or []:
        path, sep, note = value.partition("=")
        if not sep:
            raise typer.BadParameter(f"Expected PATH=NOTE, got '{value}'", param_hint="--file")
        notes[path.strip()] = note.strip()
    return notes


def unwrap(result: Result[T, TrellisFailure]) -> T:
    """Return the Ok value, or print the failure and exit with code 1."""
    if isinstance(result, Err):
        print_error(result.error.message)
        raise typer.Exit(1)
    return result.value


@contextmanager
def storage_errors() -> Iterator[None]:
    """Turn storage and lock faults into a CLI error and exit code 1."""
    try:
        yield
    except (StorageError, LockTimeout) as e:
        print_error(str(e))
        raise typer.Exit(1) from e


__all__ = [
    "print_error",
    "print_json",
    "get_config",
    "get_repository",
    "parse_request",
    "parse_file_notes",
    "unwrap",
    "storage_errors",
]
