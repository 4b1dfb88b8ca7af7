"""Conflict resolution engine.

Decides, on each sync run, whether to push the local calendar, pull the
remote one, or do nothing, and records the outcome.

Decision order (first match wins):
| Condition                          | Action                         |
|------------------------------------|--------------------------------|
| local empty, remote non-empty      | Pull                           |
| remote empty/absent, local non-empty | Push (initialize if absent)  |
| remote absent                      | Push empty, initialize remote  |
| normalized-equal                   | Rewrite local, no remote write |
| local mtime > remote commit time   | Push                           |
| local mtime < remote commit time   | Pull                           |
| equal or unknown remote time       | Push (local wins tie-break)    |

The emptiness guard runs before any timestamp logic, so a truncated
local file can never overwrite a populated remote, and vice versa.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from geekcal.client.storage import LocalCalendarFile
from geekcal.client.sync.retry import update_with_conflict_retry
from geekcal.client.sync.types import SyncOutcome, SyncResult
from geekcal.core.errors import RemoteDataError
from geekcal.core.models import collections_equal, normalize, parse_events, serialize

if TYPE_CHECKING:
    from geekcal.client.api import RemoteFile, RevisionInfo
    from geekcal.client.backup import BackupEntry, BackupManager
    from geekcal.client.state import SyncMetadataStore
    from geekcal.client.sync.types import RemoteStore
    from geekcal.core.models import Event

logger = logging.getLogger(__name__)

MSG_INITIAL = "Initial calendar data"
MSG_LOCAL_NEWER = "Sync calendar data: Local is newer"
MSG_TIE_BREAK = "Sync calendar data: Content differs, local prioritized"
MSG_REMOTE_EMPTY = "Sync calendar data: Remote was empty"


def parse_remote_events(content: str, path: str) -> list[Event]:
    """Parse and normalize remote content.

    Raises:
        RemoteDataError: If the content is not a valid event collection.
    """
    try:
        return normalize(parse_events(content))
    except ValueError as e:
        raise RemoteDataError(f"Remote {path} is not a valid event collection: {e}") from e


class SyncEngine:
    """Keeps the local calendar file and the remote copy consistent."""

    def __init__(
        self,
        store: RemoteStore,
        remote_path: str,
        remote_key: str,
        backups: BackupManager,
        metadata: SyncMetadataStore,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Remote store client.
            remote_path: Path of the calendar file in the remote store.
            remote_key: Key of this remote in the sync metadata.
            backups: Backup manager for pre-sync snapshots.
            metadata: Sync metadata store.
        """
        self.store = store
        self.remote_path = remote_path
        self.remote_key = remote_key
        self.backups = backups
        self.metadata = metadata

    def _snapshot(self, local: LocalCalendarFile) -> BackupEntry | None:
        """Back up the local file. Failures are logged, never raised."""
        try:
            entry = self.backups.snapshot(local.path)
        except OSError as e:
            logger.warning(f"Backup of {local.path} failed, continuing: {e}")
            return None
        logger.debug(f"Snapshot {entry.file_name} taken")
        return entry

    def _record(self, revision_id: str | None) -> None:
        """Record the authoritative revision. Failures are logged, never raised."""
        if revision_id is None:
            return
        try:
            self.metadata.load()
            self.metadata.record_revision(self.remote_key, revision_id)
        except OSError as e:
            logger.warning(f"Could not record revision {revision_id} in {self.metadata.path}: {e}")

    def _push(
        self,
        local: LocalCalendarFile,
        events: list[Event],
        remote: RemoteFile | None,
        message: str,
    ) -> str | None:
        """Write events to the remote, then rewrite local in normalized form."""
        expected_hash = remote.revision.content_hash if remote else None
        revision_id = update_with_conflict_retry(
            self.store,
            self.remote_path,
            events,
            serialize(events),
            message,
            expected_hash,
        )
        local.save(events)
        self._record(revision_id)
        return revision_id

    def _pull(self, local: LocalCalendarFile, events: list[Event], remote: RemoteFile) -> str | None:
        """Adopt the remote collection locally."""
        local.save(events)
        revision_id = remote.revision.revision_id
        self._record(revision_id)
        return revision_id

    def sync(self, local_path: Path) -> SyncResult:
        """Run one sync.

        Args:
            local_path: Path of the local calendar file.

        Returns:
            SyncResult describing the action taken.

        Raises:
            LocalDataError: Local file is not a valid collection.
            RemoteDataError: Remote file is not a valid collection.
            NetworkError: Remote store failure (including a repeated conflict).
            AuthorizationError: Credentials rejected.
        """
        local = LocalCalendarFile(local_path)
        local.ensure_exists()
        backup = self._snapshot(local)

        local_events = local.load()
        local_time = local.modified_time()

        remote = self.store.fetch_current(self.remote_path)
        remote_events = parse_remote_events(remote.content, self.remote_path) if remote else []

        def result(outcome: SyncOutcome, events: list[Event], revision_id: str | None) -> SyncResult:
            logger.info(f"Sync {self.remote_key}: {outcome.value} ({len(events)} events)")
            return SyncResult(outcome=outcome, events=events, revision_id=revision_id, backup=backup)

        # Emptiness guard: never let an empty replica overwrite a populated one
        if remote is not None and remote_events and not local_events:
            return result(SyncOutcome.PULLED, remote_events, self._pull(local, remote_events, remote))

        if not remote_events and local_events:
            if remote is None:
                revision_id = self._push(local, local_events, None, MSG_INITIAL)
                return result(SyncOutcome.INITIALIZED_REMOTE, local_events, revision_id)
            revision_id = self._push(local, local_events, remote, MSG_REMOTE_EMPTY)
            return result(SyncOutcome.PUSHED, local_events, revision_id)

        if remote is None:
            revision_id = self._push(local, local_events, None, MSG_INITIAL)
            return result(SyncOutcome.INITIALIZED_REMOTE, local_events, revision_id)

        if collections_equal(local_events, remote_events):
            local.save(local_events)
            self._record(remote.revision.revision_id)
            return result(SyncOutcome.NO_OP_ALREADY_EQUAL, local_events, remote.revision.revision_id)

        remote_time = remote.revision.last_change_time
        logger.debug(f"Local modified {local_time.isoformat()}, remote changed {remote_time}")

        if remote_time is not None and local_time < remote_time:
            return result(SyncOutcome.PULLED, remote_events, self._pull(local, remote_events, remote))

        message = MSG_LOCAL_NEWER if remote_time is not None and local_time > remote_time else MSG_TIE_BREAK
        revision_id = self._push(local, local_events, remote, message)
        return result(SyncOutcome.PUSHED, local_events, revision_id)

    # === Recovery ===

    def remote_history(self, limit: int = 10) -> list[RevisionInfo]:
        """List revisions of the remote file, most recent first."""
        return self.store.fetch_history(self.remote_path, limit)

    def known_revisions(self) -> list[str]:
        """Revision ids recorded by previous sync runs, most recent first."""
        self.metadata.load()
        return self.metadata.history(self.remote_key)

    def restore_revision(self, local_path: Path, revision_id: str) -> list[Event]:
        """Replace the local calendar with the remote file at a revision.

        The local file is backed up first. The remote is left untouched;
        the next sync pushes the restored content because the local file
        is then the most recently modified replica.

        Raises:
            RemoteDataError: If the revision content is not a valid collection.
        """
        local = LocalCalendarFile(local_path)
        local.ensure_exists()
        self._snapshot(local)

        content = self.store.fetch_at_revision(self.remote_path, revision_id)
        events = parse_remote_events(content, f"{self.remote_path}@{revision_id}")
        local.save(events)
        logger.info(f"Restored {len(events)} events from revision {revision_id}")
        return events
