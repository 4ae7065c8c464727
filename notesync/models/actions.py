"""
Actions accepted by the state reducer.

Actions are produced by the event decoder (remote events) or by the
content loader (fetch lifecycle). Each action is an immutable value.
"""

from pydantic import BaseModel, ConfigDict, Field

from notesync.models.messages import NoteUpdate


class Action(BaseModel):
    """Base class for reducer actions."""

    model_config = ConfigDict(frozen=True)


class Building(Action):
    """The authority started a rebuild. Carries no state change."""


class Initialize(Action):
    """Replace graph, titles and content with a full snapshot."""

    outgoing_links: dict[str, list[str]] = Field(default_factory=dict)
    titles: dict[str, str] = Field(default_factory=dict)
    default_note_id: str | None = None


class Update(Action):
    """Apply change records in list order."""

    entries: list[NoteUpdate] = Field(default_factory=list)


class Remove(Action):
    """Drop notes and every edge touching them."""

    ids: list[str] = Field(default_factory=list)


class FetchingContent(Action):
    """A content fetch for ``id`` has been issued."""

    id: str


class SetContent(Action):
    """A content fetch for ``id`` completed with ``html``."""

    id: str
    html: str


class Focus(Action):
    """Navigate to ``id``. Handled by the navigation hook, not the reducer."""

    id: str
