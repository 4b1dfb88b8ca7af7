"""Recovery commands for the geekcal CLI.

Commands:
- history: List revisions of the remote calendar
- restore-revision: Replace the local calendar with a remote revision
- backups list: List local pre-sync backups
- backups restore: Copy a backup over the local calendar
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from geekcal.client.backup import BackupManager
from geekcal.client.cli import config as cli_config
from geekcal.client.cli.sync import fail, open_engine
from geekcal.client.storage import LocalCalendarFile
from geekcal.core.errors import CalendarSyncError

calendar_file_option = click.option(
    "--file",
    "calendar_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Local calendar file (default: calendar.json in the config directory).",
)


@click.command()
@click.option("--limit", "-n", default=10, show_default=True, help="Number of revisions to show.")
def history(limit: int) -> None:
    """List revisions of the remote calendar, most recent first.

    Revisions seen by earlier syncs on this machine are marked with '*'.
    """
    try:
        with open_engine() as (engine, remote_key):
            revisions = engine.remote_history(limit)
            known = set(engine.known_revisions())
    except CalendarSyncError as e:
        fail(e)

    if not revisions:
        click.echo(f"No revisions found for {remote_key}.")
        return

    click.echo(f"Revisions of {remote_key}:")
    for rev in revisions:
        marker = "*" if rev.revision_id in known else " "
        summary = rev.message.splitlines()[0] if rev.message else ""
        click.echo(f"{marker} {rev.revision_id[:7]}  {rev.timestamp:%Y-%m-%d %H:%M:%S}  {summary}")


@click.command("restore-revision")
@click.argument("revision")
@calendar_file_option
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
def restore_revision(revision: str, calendar_file: Path | None, yes: bool) -> None:
    """Replace the local calendar with the remote calendar at REVISION.

    The current local file is backed up first. Run 'geekcal sync'
    afterwards to publish the restored calendar.
    """
    local_path = calendar_file or cli_config.get_calendar_file()
    if not yes and not click.confirm(f"Overwrite {local_path} with revision {revision}?"):
        click.echo("Restore cancelled.")
        sys.exit(0)

    try:
        with open_engine() as (engine, _):
            events = engine.restore_revision(local_path, revision)
    except CalendarSyncError as e:
        fail(e)

    click.echo(f"Restored {len(events)} events from {revision} into {local_path}")


@click.group()
def backups() -> None:
    """Manage local pre-sync backups."""


@backups.command("list")
def list_backups() -> None:
    """List backups, most recent first."""
    entries = BackupManager(cli_config.get_backup_dir()).list()
    if not entries:
        click.echo("No backups found.")
        return
    for entry in entries:
        click.echo(f"{entry.file_name}  {entry.modified_time.astimezone():%Y-%m-%d %H:%M:%S}")


@backups.command("restore")
@click.argument("name")
@calendar_file_option
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
def restore_backup(name: str, calendar_file: Path | None, yes: bool) -> None:
    """Copy backup NAME over the local calendar."""
    manager = BackupManager(cli_config.get_backup_dir())
    entry = manager.find(name)
    if entry is None:
        click.echo(f"Error: no backup named {name}", err=True)
        sys.exit(1)

    local_path = calendar_file or cli_config.get_calendar_file()
    if not yes and not click.confirm(f"Overwrite {local_path} with {entry.file_name}?"):
        click.echo("Restore cancelled.")
        sys.exit(0)

    manager.restore(entry, local_path)
    try:
        events = LocalCalendarFile(local_path).load()
    except CalendarSyncError as e:
        fail(e)
    click.echo(f"Restored {len(events)} events from {entry.file_name} into {local_path}")
