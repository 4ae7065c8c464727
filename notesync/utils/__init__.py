"""Utility modules for notesync."""

from notesync.utils.exceptions import (
    ConfigurationError,
    ContentFetchError,
    DecodeError,
    InvariantViolationError,
    MalformedMessageError,
    MissingPayloadError,
    NoteSyncError,
    StateError,
    UnknownTagError,
)
from notesync.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Exceptions
    "NoteSyncError",
    "DecodeError",
    "MalformedMessageError",
    "MissingPayloadError",
    "UnknownTagError",
    "ContentFetchError",
    "InvariantViolationError",
    "StateError",
    "ConfigurationError",
]
