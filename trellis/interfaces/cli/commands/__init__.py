"""CLI commands for trellis.

Each module holds plain command functions that the main Typer app
registers at the top level.

Command modules:
- objects: create, get, list, update, delete
- lifecycle: claim, complete, next, prune
- content: replace-body, append-log, append-files
"""

from trellis.interfaces.cli.commands import content, lifecycle, objects

__all__ = ["objects", "lifecycle", "content"]
