"""Shared types for sync operations.

This module provides:
- SyncOutcome: Which action a sync run took
- SyncResult: Overall sync operation result
- RemoteStore: Protocol the engine needs from the remote client
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from geekcal.client.api import RemoteFile, RevisionInfo
    from geekcal.client.backup import BackupEntry
    from geekcal.core.models import Event


class SyncOutcome(str, Enum):
    """Action taken by a successful sync run."""

    PUSHED = "pushed"  # Local content written to the remote
    PULLED = "pulled"  # Remote content written locally
    NO_OP_ALREADY_EQUAL = "no_op_already_equal"  # Replicas already equal
    INITIALIZED_REMOTE = "initialized_remote"  # Remote file created from local


@dataclass
class SyncResult:
    """Result of a sync run.

    Attributes:
        outcome: Action taken.
        events: Resolved collection, normalized.
        revision_id: Authoritative remote revision after the run, if known.
        backup: Snapshot taken before the run, or None if it failed.
    """

    outcome: SyncOutcome
    events: list[Event] = field(default_factory=list)
    revision_id: str | None = None
    backup: BackupEntry | None = None


class RemoteStore(Protocol):
    """Remote operations consumed by the sync engine."""

    def fetch_current(self, path: str) -> RemoteFile | None:
        ...

    def fetch_history(self, path: str, limit: int = 10) -> list[RevisionInfo]:
        ...

    def fetch_at_revision(self, path: str, revision_id: str) -> str:
        ...

    def update_content(
        self,
        path: str,
        content: str,
        message: str,
        expected_hash: str | None = None,
    ) -> str:
        ...
