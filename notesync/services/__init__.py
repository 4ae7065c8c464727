"""
Services for notesync.

- NotesApiClient: HTTP content and metadata fetches
- SyncSession: stream consumption, fault reporting and content loading
"""

from notesync.services.notes_api import NotesApiClient
from notesync.services.sync_session import SessionStats, SyncSession, log_fault

__all__ = [
    "NotesApiClient",
    "SyncSession",
    "SessionStats",
    "log_fault",
]
