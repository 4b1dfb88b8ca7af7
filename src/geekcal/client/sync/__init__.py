"""Sync operations between the local calendar file and the remote copy.

Architecture:
    SyncEngine → BackupManager (snapshot) → LocalCalendarFile (load)
               → RemoteStore (fetch, update with conflict retry)
               → LocalCalendarFile (write) → SyncMetadataStore (record)

Components:
- **SyncEngine**: Decides push/pull/no-op and performs it; restores revisions
- **update_with_conflict_retry**: Single bounded retry on a stale content hash
- **SyncOutcome / SyncResult**: What a run did
"""

from geekcal.client.sync.engine import SyncEngine, parse_remote_events
from geekcal.client.sync.retry import MAX_CONFLICT_RETRIES, update_with_conflict_retry
from geekcal.client.sync.types import RemoteStore, SyncOutcome, SyncResult

__all__ = [
    # Engine
    "SyncEngine",
    "parse_remote_events",
    # Retry
    "MAX_CONFLICT_RETRIES",
    "update_with_conflict_retry",
    # Types
    "RemoteStore",
    "SyncOutcome",
    "SyncResult",
]
