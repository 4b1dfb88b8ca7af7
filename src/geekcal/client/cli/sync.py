"""Sync command for the geekcal CLI.

Commands:
- sync: Synchronize the local calendar with the GitHub copy
"""

from __future__ import annotations

import contextlib
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import NoReturn

import click

from geekcal.client.api import GitHubContentsClient
from geekcal.client.backup import BackupManager
from geekcal.client.cli import config as cli_config
from geekcal.client.state import SyncMetadataStore
from geekcal.client.sync import SyncEngine, SyncOutcome
from geekcal.core.config import load_remote_config
from geekcal.core.errors import (
    AuthorizationError,
    CalendarSyncError,
    ConflictError,
    ForbiddenError,
    LocalDataError,
    RemoteDataError,
    UnauthorizedError,
)

OUTCOME_MESSAGES = {
    SyncOutcome.PUSHED: "Pushed local calendar to {remote}.",
    SyncOutcome.PULLED: "Pulled calendar from {remote}.",
    SyncOutcome.NO_OP_ALREADY_EQUAL: "Everything is up to date.",
    SyncOutcome.INITIALIZED_REMOTE: "Created {remote} from local calendar.",
}


def describe_error(error: CalendarSyncError) -> str:
    """Turn a classified sync failure into a one-line message."""
    if isinstance(error, UnauthorizedError):
        return f"GitHub rejected the token ({error}). Check the token in config.yml or GITHUB_TOKEN."
    if isinstance(error, ForbiddenError):
        return f"GitHub refused the request ({error}). Wait and retry, or check repository permissions."
    if isinstance(error, AuthorizationError):
        return f"Authorization failed: {error}"
    if isinstance(error, LocalDataError):
        return f"Local calendar is invalid and was not modified: {error}"
    if isinstance(error, RemoteDataError):
        return f"Remote calendar is invalid, inspect it on GitHub: {error}"
    if isinstance(error, ConflictError):
        return f"Remote calendar keeps changing during sync, try again later: {error}"
    return str(error)


def fail(error: CalendarSyncError) -> NoReturn:
    """Print an error and exit with status 1."""
    click.echo(f"Error: {describe_error(error)}", err=True)
    sys.exit(1)


@contextlib.contextmanager
def open_engine() -> Iterator[tuple[SyncEngine, str]]:
    """Build a SyncEngine from the configuration directory.

    Yields:
        (engine, remote key) tuple. The HTTP client is closed on exit.
    """
    remote_config = load_remote_config(cli_config.get_config_file())
    with GitHubContentsClient(remote_config) as client:
        engine = SyncEngine(
            store=client,
            remote_path=remote_config.path,
            remote_key=remote_config.remote_key,
            backups=BackupManager(cli_config.get_backup_dir()),
            metadata=SyncMetadataStore(cli_config.get_metadata_file()),
        )
        yield engine, remote_config.remote_key


@click.command()
@click.option(
    "--file",
    "calendar_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Local calendar file (default: calendar.json in the config directory).",
)
def sync(calendar_file: Path | None) -> None:
    """Synchronize the local calendar with GitHub.

    The local file is backed up first. The more recently changed replica
    wins; an empty replica never overwrites a populated one.
    """
    local_path = calendar_file or cli_config.get_calendar_file()

    try:
        with open_engine() as (engine, remote_key):
            result = engine.sync(local_path)
    except CalendarSyncError as e:
        fail(e)

    click.echo(OUTCOME_MESSAGES[result.outcome].format(remote=remote_key))
    click.echo(f"{len(result.events)} events in {local_path}")
    if result.backup is None:
        click.echo(click.style("Warning: no backup was taken before this sync.", fg="yellow"), err=True)
