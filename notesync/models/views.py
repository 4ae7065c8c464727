"""
Read-side views over the replica state.
"""

from pydantic import BaseModel, ConfigDict, Field

from notesync.models.content import ContentEntry


class NoteView(BaseModel):
    """A note with its title, direct links, backlinks and cached content."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str | None = None
    links: list[str] = Field(default_factory=list)
    backlinks: list[str] = Field(default_factory=list)
    content: ContentEntry | None = None


class NoteMetadata(BaseModel):
    """Metadata returned by the notes API for a single note."""

    title: str
    links: list[str] = Field(default_factory=list)
    backlinks: list[str] = Field(default_factory=list)
