"""CLI interface for trellis using Typer.

This module provides the command-line interface for trellis, a
hierarchical work tracker stored as markdown files.

Usage:
    trellis create task "Write docs" --parent F-docs
    trellis claim                   # Claim the next available task
    trellis complete T-write-docs -s "Docs written" -f README.md="rewrote intro"
    trellis prune --age-minutes 1440

The CLI is structured as:
- app: Main Typer application
- commands/: Command functions grouped by service
- common.py: Shared utilities for CLI commands
- main.py: Entry point that runs the app
"""

import logging
from pathlib import Path
from typing import Optional

import typer

from trellis import __version__
from trellis.config import ENV_PLANNING_ROOT, load_config
from trellis.interfaces.cli.commands import content, lifecycle, objects

# Create the main Typer application
app = typer.Typer(
    name="trellis",
    help="Hierarchical work tracking for projects, epics, features and tasks",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"trellis version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        help="Planning root folder",
        envvar=ENV_PLANNING_ROOT,
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default: ~/.trellis/config.json)",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Trellis - projects, epics, features and tasks as markdown files."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    config = load_config(config_file)
    if root is not None:
        config = config.model_copy(update={"planning_root": root})
    ctx.obj = config


# =============================================================================
# Register Commands
# =============================================================================

app.command("create")(objects.create)
app.command("get")(objects.get)
app.command("list")(objects.list_cmd)
app.command("update")(objects.update)
app.command("delete")(objects.delete)

app.command("claim")(lifecycle.claim)
app.command("complete")(lifecycle.complete)
app.command("next")(lifecycle.next_issue)
app.command("prune")(lifecycle.prune)

app.command("replace-body")(content.replace_body_cmd)
app.command("append-log")(content.append_log_cmd)
app.command("append-files")(content.append_files_cmd)
