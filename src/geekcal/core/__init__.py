"""Core module - Event model, configuration and error taxonomy."""

from geekcal.core.config import RemoteConfig, load_remote_config
from geekcal.core.errors import (
    AuthorizationError,
    CalendarSyncError,
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    LocalDataError,
    NetworkError,
    NotFoundError,
    RemoteDataError,
    UnauthorizedError,
)
from geekcal.core.models import Event, collections_equal, normalize, parse_events, serialize

__all__ = [
    # Config
    "RemoteConfig",
    "load_remote_config",
    # Errors
    "AuthorizationError",
    "CalendarSyncError",
    "ConfigurationError",
    "ConflictError",
    "ForbiddenError",
    "LocalDataError",
    "NetworkError",
    "NotFoundError",
    "RemoteDataError",
    "UnauthorizedError",
    # Models
    "Event",
    "collections_equal",
    "normalize",
    "parse_events",
    "serialize",
]
