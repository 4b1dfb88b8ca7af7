"""Local calendar file persistence.

This module provides:
- LocalCalendarFile: Reads and writes the event collection as a JSON file

The adapter has no decision authority: it never replaces a file that
fails to parse, it only reports the failure as LocalDataError.
"""

from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from pathlib import Path

from geekcal.core.errors import LocalDataError
from geekcal.core.models import Event, normalize, parse_events, serialize

logger = logging.getLogger(__name__)


class LocalCalendarFile:
    """The local replica of the calendar."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def ensure_exists(self) -> bool:
        """Create the file with an empty collection if it is absent.

        Returns:
            True if the file was created.
        """
        if self.path.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("[]", encoding="utf-8")
        logger.info(f"Created empty calendar file {self.path}")
        return True

    def load(self) -> list[Event]:
        """Load and normalize the local events.

        Raises:
            LocalDataError: If the file cannot be read or parsed.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LocalDataError(f"Cannot read {self.path}: {e}") from e
        try:
            return normalize(parse_events(text))
        except ValueError as e:
            raise LocalDataError(f"{self.path} is not a valid event collection: {e}") from e

    def save(self, events: list[Event]) -> None:
        """Write events in normalized form.

        The content goes to a sibling temp file first, then replaces the
        target, so an interrupted write never leaves a truncated calendar.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(serialize(events), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def modified_time(self) -> datetime:
        """Return the file modification time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.path.stat().st_mtime, tz=UTC)
