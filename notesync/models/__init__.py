"""
Data models for notesync.

- Messages: wire envelopes streamed by the notes authority
- Actions: typed reducer inputs derived from messages and fetches
- ContentEntry, ContentStatus: per-note content cache
- NoteView, NoteMetadata: read-side views
"""

from notesync.models.actions import (
    Action,
    Building,
    FetchingContent,
    Focus,
    Initialize,
    Remove,
    SetContent,
    Update,
)
from notesync.models.content import ContentEntry, ContentStatus
from notesync.models.messages import (
    PAYLOAD_TAGS,
    BuildingMessage,
    FocusMessage,
    InitializeMessage,
    InitializePayload,
    Message,
    MessageTag,
    NoteUpdate,
    RemoveMessage,
    UpdateMessage,
)
from notesync.models.views import NoteMetadata, NoteView

__all__ = [
    # Actions
    "Action",
    "Building",
    "Initialize",
    "Update",
    "Remove",
    "FetchingContent",
    "SetContent",
    "Focus",
    # Content cache
    "ContentEntry",
    "ContentStatus",
    # Messages
    "Message",
    "MessageTag",
    "PAYLOAD_TAGS",
    "BuildingMessage",
    "InitializeMessage",
    "InitializePayload",
    "UpdateMessage",
    "RemoveMessage",
    "FocusMessage",
    "NoteUpdate",
    # Views
    "NoteView",
    "NoteMetadata",
]
