"""
Content cache entry with a fetch status lifecycle.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ContentStatus(str, Enum):
    """Lifecycle status of a cached note body."""

    EMPTY = "empty"  # Never fetched
    LOADING = "loading"  # Fetch in flight
    LOADED = "loaded"  # Fresh
    DIRTY = "dirty"  # Loaded once, invalidated by a later update


class ContentEntry(BaseModel):
    """
    Cached rendered content for a single note.

    Entries are immutable; reducers derive new entries with model_copy so
    a state snapshot held by a reader never changes underneath it.
    Stale html is kept through dirty -> loading so the last known body
    can be shown while a refetch is in flight.
    """

    model_config = ConfigDict(frozen=True)

    html: str | None = Field(default=None, description="Rendered HTML, None until first load")
    status: ContentStatus = Field(default=ContentStatus.EMPTY, description="Fetch status")
    warnings: list[str] = Field(default_factory=list, description="Compiler warnings for the note")
    errors: list[str] = Field(default_factory=list, description="Compiler errors for the note")

    def is_stale(self) -> bool:
        """
        Check whether the entry should be refetched.

        Returns:
            True if the entry was never loaded or was invalidated
        """
        return self.status in (ContentStatus.EMPTY, ContentStatus.DIRTY)
