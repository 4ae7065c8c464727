"""
notesync - client-side synchronization core for a linked notes viewer.

Keeps a local mirror of the note link graph and a per-note content
cache consistent with a remote authority that streams change messages.

    message -> EventDecoder -> Action -> StateStore.reduce -> State
"""

from notesync.config import Config
from notesync.core import EventDecoder, GraphIndex, State, StateStore, initial_state, reduce
from notesync.models import ContentEntry, ContentStatus
from notesync.services import NotesApiClient, SyncSession

__version__ = "0.1.0"

__all__ = [
    "Config",
    "GraphIndex",
    "State",
    "StateStore",
    "initial_state",
    "reduce",
    "EventDecoder",
    "ContentEntry",
    "ContentStatus",
    "NotesApiClient",
    "SyncSession",
]
