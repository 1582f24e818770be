#!/usr/bin/env python3
"""
Main CLI entry point using Typer.
"""

import sys
from typing import Optional

import typer

from lvm_toolkit.cli.commands import tool
from lvm_toolkit.cli.lib.config import configure_logging, load_config

app = typer.Typer(
    name="lvmtk",
    help="LVM Toolkit: validated LVM commands with confirmation for removals",
    add_completion=False,
)

# Add command groups
app.add_typer(tool.app, name="tools", help="Tool commands")


@app.callback()
def setup(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: from config or INFO)"),
):
    """
    LVM Toolkit command line.
    """
    configure_logging(log_level or load_config().log_level)


def main() -> int:
    """Main entry point."""
    try:
        app()
        return 0
    except KeyboardInterrupt:
        typer.echo("\nOperation cancelled by user", err=True)
        return 130
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
