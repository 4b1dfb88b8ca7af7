"""Local backup snapshots of the calendar file.

This module provides:
- BackupEntry: One snapshot on disk
- BackupManager: Snapshot, list and restore backups
- generate_backup_filename: Timestamp-derived backup file name

Backups are byte-for-byte copies taken before every sync attempt. They
are never deleted here; retention is left to the user.
"""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "calendar_backup_"
BACKUP_SUFFIX = ".json"


@dataclass(frozen=True)
class BackupEntry:
    """A backup file.

    Attributes:
        file_name: Name of the backup file.
        full_path: Absolute path of the backup file.
        modified_time: Modification time of the backup file (UTC).
    """

    file_name: str
    full_path: Path
    modified_time: datetime

    @classmethod
    def from_path(cls, path: Path) -> BackupEntry:
        """Create from a file on disk."""
        return cls(
            file_name=path.name,
            full_path=path,
            modified_time=datetime.fromtimestamp(path.stat().st_mtime, tz=UTC),
        )


def generate_backup_filename(now: datetime | None = None) -> str:
    """Generate a backup file name from a timestamp.

    Format: calendar_backup_<ISO8601 with non-alphanumerics stripped>.json

    Args:
        now: Timestamp to use (defaults to the current UTC time).

    Returns:
        Backup file name.
    """
    if now is None:
        now = datetime.now(UTC)
    stamp = re.sub(r"[^0-9A-Za-z]", "", now.isoformat())
    return f"{BACKUP_PREFIX}{stamp}{BACKUP_SUFFIX}"


class BackupManager:
    """Manages timestamped copies of the local calendar file."""

    def __init__(self, backup_dir: Path) -> None:
        self.backup_dir = Path(backup_dir)

    def snapshot(self, source: Path) -> BackupEntry:
        """Copy the source file into the backup directory.

        Args:
            source: File to back up.

        Returns:
            The created backup entry.

        Raises:
            OSError: If the copy fails. Callers treat this as non-fatal.
        """
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        name = generate_backup_filename()
        target = self.backup_dir / name

        counter = 1
        while target.exists():
            target = self.backup_dir / f"{name[: -len(BACKUP_SUFFIX)]}_{counter}{BACKUP_SUFFIX}"
            counter += 1

        # copyfile, not copy2: the backup mtime must be the snapshot time
        shutil.copyfile(source, target)
        logger.debug(f"Backed up {source} to {target}")
        return BackupEntry.from_path(target)

    def list(self) -> list[BackupEntry]:
        """List backups, most recently modified first."""
        if not self.backup_dir.is_dir():
            return []
        entries = [
            BackupEntry.from_path(p)
            for p in self.backup_dir.glob(f"{BACKUP_PREFIX}*{BACKUP_SUFFIX}")
            if p.is_file()
        ]
        entries.sort(key=lambda e: (e.modified_time, e.file_name), reverse=True)
        return entries

    def find(self, file_name: str) -> BackupEntry | None:
        """Find a backup by file name."""
        for entry in self.list():
            if entry.file_name == file_name:
                return entry
        return None

    def restore(self, entry: BackupEntry, destination: Path) -> None:
        """Copy a backup over the destination file, overwriting it.

        Confirming the overwrite is the caller's responsibility.
        """
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(entry.full_path, destination)
        logger.info(f"Restored {entry.file_name} to {destination}")
