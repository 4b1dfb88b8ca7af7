"""Configuration utilities for the geekcal CLI.

This module provides shared path and setup functions used across CLI commands.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

CONFIG_DIR_ENV_VAR = "GEEKCAL_CONFIG_DIR"


def get_config_dir() -> Path:
    """Get the configuration directory for geekcal.

    Returns:
        Path to ~/.config/geekcalendar, or $GEEKCAL_CONFIG_DIR if set.
    """
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "geekcalendar"


def get_config_file() -> Path:
    """Get the path to the remote configuration file."""
    return get_config_dir() / "config.yml"


def get_calendar_file() -> Path:
    """Get the path to the local calendar file."""
    return get_config_dir() / "calendar.json"


def get_backup_dir() -> Path:
    """Get the directory holding pre-sync backups."""
    return get_config_dir() / "backups"


def get_metadata_file() -> Path:
    """Get the path to the sync metadata file."""
    return get_config_dir() / "sync_metadata.json"


def setup_logging(verbose: bool) -> None:
    """Send geekcal log records to stderr.

    Args:
        verbose: Show debug records instead of warnings and errors only.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    geekcal_logger = logging.getLogger("geekcal")
    for existing in geekcal_logger.handlers[:]:
        geekcal_logger.removeHandler(existing)
    geekcal_logger.addHandler(handler)
    geekcal_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    geekcal_logger.propagate = False
