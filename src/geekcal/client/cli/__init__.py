"""Command-line interface for geekcal.

This module provides the main CLI entry point and assembles all commands.

Commands:
- sync: Synchronize the local calendar with GitHub
- history: List revisions of the remote calendar
- restore-revision: Restore the local calendar from a remote revision
- backups list / backups restore: Inspect and restore local backups
"""

from __future__ import annotations

import click

from geekcal.client.cli.config import (
    get_backup_dir,
    get_calendar_file,
    get_config_dir,
    get_config_file,
    get_metadata_file,
    setup_logging,
)
from geekcal.client.cli.recovery import backups, history, restore_revision
from geekcal.client.cli.sync import sync


@click.group()
@click.version_option(package_name="geekcal")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output.")
def cli(verbose: bool) -> None:
    """geekcal - calendar sync with GitHub."""
    setup_logging(verbose)


# Sync commands
cli.add_command(sync)

# Recovery commands
cli.add_command(history)
cli.add_command(restore_revision)
cli.add_command(backups)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "get_backup_dir",
    "get_calendar_file",
    "get_config_dir",
    "get_config_file",
    "get_metadata_file",
]
