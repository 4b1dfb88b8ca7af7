"""Sync metadata: recently seen remote revisions.

This module provides:
- SyncMetadataStore: JSON-file store of revision history per remote

File layout:
    {"remotes": {"<owner>/<repo>:<path>": {"history": [...], "updatedAt": "..."}}}

The metadata is advisory. It is never consulted when deciding a sync
direction, so a missing or corrupt file simply loads as empty.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 5


class SyncMetadataStore:
    """Tracks the most recent remote revision ids for each remote."""

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: Path of the metadata JSON file.
        """
        self._path = Path(path)
        self._data: dict[str, Any] = {"remotes": {}}

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        """Load the metadata file, falling back to an empty store."""
        self._data = {"remotes": {}}
        if not self._path.exists():
            return self._data

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable sync metadata {self._path}: {e}")
            return self._data

        if isinstance(raw, dict) and isinstance(raw.get("remotes"), dict):
            self._data = raw
        else:
            logger.warning(f"Ignoring malformed sync metadata {self._path}")
        return self._data

    def save(self) -> None:
        """Write the whole metadata structure."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    def history(self, remote_key: str) -> list[str]:
        """Return known revision ids for a remote, most recent first."""
        entry = self._data["remotes"].get(remote_key)
        if not isinstance(entry, dict) or not isinstance(entry.get("history"), list):
            return []
        return list(entry["history"])

    def record_revision(self, remote_key: str, revision_id: str) -> None:
        """Record a revision as the most recent one and persist.

        The id is prepended unless it already heads the history, and the
        history is truncated to HISTORY_LIMIT entries.
        """
        history = self.history(remote_key)
        if not history or history[0] != revision_id:
            history.insert(0, revision_id)
        self._data["remotes"][remote_key] = {
            "history": history[:HISTORY_LIMIT],
            "updatedAt": datetime.now(UTC).isoformat(),
        }
        self.save()
