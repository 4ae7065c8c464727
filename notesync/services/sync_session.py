"""
Sync Session - drives the replica from the update stream.

Handles:
- Decoding and reducing inbound messages strictly in arrival order
- Surfacing decode and state faults to an observer, then moving on
- Routing focus messages to a navigation hook
- Fetch-on-demand for note content with in-flight deduplication
"""

from collections.abc import AsyncIterable, Callable
from typing import Any, Protocol

from pydantic import BaseModel, Field

from notesync.core.decoder import EventDecoder
from notesync.core.state_store import State, StateStore
from notesync.models.actions import FetchingContent, Focus, SetContent
from notesync.utils.exceptions import ContentFetchError, DecodeError, NoteSyncError, StateError
from notesync.utils.logger import get_logger

logger = get_logger(__name__)

FaultObserver = Callable[[NoteSyncError], None]
FocusHandler = Callable[[str], None]


class ContentSource(Protocol):
    """Anything that can fetch a note's rendered HTML."""

    async def get_note_content(self, note_id: str) -> str: ...


class SessionStats(BaseModel):
    """Counters for a running session."""

    messages: int = 0
    applied: int = 0
    faults: dict[str, int] = Field(default_factory=dict)
    fetches: int = 0

    @property
    def fault_count(self) -> int:
        return sum(self.faults.values())


def log_fault(error: NoteSyncError) -> None:
    """Default fault observer: log and carry on."""
    logger.warning(
        "Dropped message: {}",
        error.message,
        extra={"error_type": type(error).__name__, **error.context},
    )


class SyncSession:
    """
    Applies the update stream and content fetches to a StateStore.

    Each message goes through decode -> dispatch -> reduce -> commit
    before the next one is looked at. Content loading is split into a
    fetching and a set action so other messages may land in between.
    """

    def __init__(
        self,
        store: StateStore | None = None,
        content_source: ContentSource | None = None,
        decoder: EventDecoder | None = None,
        on_fault: FaultObserver | None = None,
        on_focus: FocusHandler | None = None,
    ):
        """
        Initialize sync session.

        Args:
            store: State store to drive (default: fresh uninitialized store)
            content_source: Content fetch collaborator, e.g. NotesApiClient
            decoder: Message decoder
            on_fault: Observer for dropped messages (default: log a warning)
            on_focus: Navigation hook called with the id of a focus message
        """
        self.store = store or StateStore()
        self.content_source = content_source
        self.decoder = decoder or EventDecoder()
        self.on_fault = on_fault or log_fault
        self.on_focus = on_focus
        self.stats = SessionStats()

    @property
    def state(self) -> State:
        return self.store.state

    def _report(self, error: NoteSyncError) -> None:
        kind = type(error).__name__
        self.stats.faults[kind] = self.stats.faults.get(kind, 0) + 1
        self.on_fault(error)

    def handle_message(self, raw: Any) -> State | None:
        """
        Process one inbound message.

        Args:
            raw: JSON text/bytes or parsed envelope

        Returns:
            The committed state, or None if the message was dropped

        Raises:
            InvariantViolationError: If the graph index is found inconsistent
        """
        self.stats.messages += 1

        try:
            action = self.decoder.decode(raw)
        except DecodeError as e:
            self._report(e)
            return None

        if isinstance(action, Focus):
            if self.on_focus is not None:
                self.on_focus(action.id)
            return self.state

        try:
            state = self.store.dispatch(action)
        except StateError as e:
            self._report(e)
            return None

        self.stats.applied += 1
        return state

    async def run(self, messages: AsyncIterable[Any]) -> SessionStats:
        """
        Consume a message stream until it ends.

        Cancelling the task running this coroutine stops reduction after
        the current message; committed states stay as they are.

        Args:
            messages: Async iterable of raw messages

        Returns:
            Session counters
        """
        async for raw in messages:
            self.handle_message(raw)

        logger.info(
            "Update stream ended",
            extra={
                "messages": self.stats.messages,
                "applied": self.stats.applied,
                "faults": self.stats.fault_count,
            },
        )
        return self.stats

    async def load_content(self, note_id: str, force: bool = False) -> State:
        """
        Fetch a note's content if the cache says it is needed.

        Nothing is fetched while a fetch for the same note is in flight
        or once its content is fresh, unless ``force`` is set.

        Args:
            note_id: Note identifier
            force: Fetch even if the entry is loading or loaded

        Returns:
            Committed state after the fetch (or unchanged state if skipped)

        Raises:
            ContentFetchError: Propagated from the content source; the
                entry stays in loading
            StateError: If the store was never initialized
        """
        if self.content_source is None:
            raise StateError("No content source configured", context={"note_id": note_id})

        if not force and not self.state.needs_fetch(note_id):
            return self.state

        self.store.dispatch(FetchingContent(id=note_id))
        self.stats.fetches += 1

        try:
            html = await self.content_source.get_note_content(note_id)
        except ContentFetchError as e:
            logger.error(
                "Content fetch for {} failed: {}",
                note_id,
                e.message,
                extra={"note_id": note_id, **e.context},
            )
            raise

        return self.store.dispatch(SetContent(id=note_id, html=html))
