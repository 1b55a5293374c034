"""Entry point for the trellis CLI.

Usage:
    python -m trellis.interfaces.cli.main

Or via installed entry point:
    trellis <command>
"""

from trellis.interfaces.cli import app


def main() -> None:
    """Run the trellis CLI application."""
    app()


if __name__ == "__main__":
    main()
