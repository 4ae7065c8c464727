"""
Custom exception hierarchy for notesync.

All exceptions inherit from NoteSyncError so callers can catch
every failure raised by the synchronization core in one place.
"""


class NoteSyncError(Exception):
    """
    Base exception for all notesync errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize notesync error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class DecodeError(NoteSyncError):
    """
    Base exception for inbound message decoding.
    The offending message is dropped and processing continues.
    """

    pass


class MalformedMessageError(DecodeError):
    """
    Raised when a message is not valid JSON, is not an envelope object,
    or carries a payload that fails validation.
    """

    pass


class MissingPayloadError(DecodeError):
    """
    Raised when a tag that requires a payload arrives without one.
    """

    pass


class UnknownTagError(DecodeError):
    """
    Raised when a message tag is not part of the protocol.
    """

    pass


class ContentFetchError(NoteSyncError):
    """
    Content fetch errors.
    Raised when the notes API answers with a non-success status,
    an unexpected content type, or cannot be reached at all.
    """

    pass


class InvariantViolationError(NoteSyncError):
    """
    Graph index invariant errors.
    Raised when outgoing and incoming adjacency disagree.
    """

    pass


class StateError(NoteSyncError):
    """
    State transition errors.
    Raised when an action is applied to a state that cannot accept it.
    """

    pass


class ConfigurationError(NoteSyncError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass
