"""
Replica state and the reducer that applies actions to it.

``reduce`` is a pure function of (state, action): it never mutates the
state it is given and performs no I/O. Any action that touches the graph
works on a clone, so a reader holding the previous State keeps seeing a
complete, unchanged snapshot.

``StateStore`` holds the current State, commits one reduction at a time
and tells subscribers about each commit.
"""

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from notesync.config import StoreConfig
from notesync.core.graph_index import GraphIndex
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
from notesync.models.views import NoteView
from notesync.utils.exceptions import StateError
from notesync.utils.logger import get_logger

logger = get_logger(__name__)

Listener = Callable[["State", "State"], None]


class State(BaseModel):
    """
    Snapshot of everything mirrored from the notes authority.

    A State exclusively owns its graph; producing a new State hands it a
    freshly built or cloned graph.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    graph: GraphIndex = Field(default_factory=GraphIndex)
    titles: dict[str, str] = Field(default_factory=dict)
    content: dict[str, ContentEntry] = Field(default_factory=dict)
    initialized: bool = False
    default_note_id: str | None = None

    def content_status(self, note_id: str) -> ContentStatus:
        """Status of the cached entry, EMPTY if nothing was ever requested."""
        entry = self.content.get(note_id)
        return entry.status if entry else ContentStatus.EMPTY

    def needs_fetch(self, note_id: str) -> bool:
        """
        Check whether a content fetch should be issued for a note.

        Returns:
            True if the note was never fetched or its content is dirty.
            False while a fetch is in flight or once content is fresh.
        """
        entry = self.content.get(note_id)
        return entry is None or entry.is_stale()

    def view(self, note_id: str) -> NoteView | None:
        """
        Build a read-only view of a note and its direct neighbors.

        Returns:
            NoteView, or None if the note is neither titled nor in the graph
        """
        if note_id not in self.titles and not self.graph.has_node(note_id):
            return None

        return NoteView(
            id=note_id,
            title=self.titles.get(note_id),
            links=sorted(self.graph.links(note_id)),
            backlinks=sorted(self.graph.backlinks(note_id)),
            content=self.content.get(note_id),
        )


initial_state = State()


def _require_initialized(state: State, action: Action) -> None:
    if not state.initialized:
        raise StateError(
            f"Cannot apply {type(action).__name__} before initialize",
            context={"action": type(action).__name__},
        )


def _initialize(state: State, action: Initialize, options: StoreConfig) -> State:
    return State(
        graph=GraphIndex.from_outgoing(action.outgoing_links),
        titles=dict(action.titles),
        content={},
        initialized=True,
        default_note_id=action.default_note_id,
    )


def _update(state: State, action: Update, options: StoreConfig) -> State:
    titles = dict(state.titles)
    content = dict(state.content)
    graph = state.graph.copy()

    for entry in action.entries:
        titles[entry.id] = entry.title

        cached = content.get(entry.id)
        if cached is not None:
            content[entry.id] = cached.model_copy(
                update={
                    "status": ContentStatus.DIRTY,
                    "warnings": list(entry.warnings),
                    "errors": list(entry.errors),
                }
            )

        if options.replace_links_on_update:
            graph.reconcile_node(entry.id, entry.links, graph.backlinks(entry.id))
        else:
            for link in entry.links:
                graph.add_edge(entry.id, link)

    return state.model_copy(update={"graph": graph, "titles": titles, "content": content})


def _remove(state: State, action: Remove, options: StoreConfig) -> State:
    titles = dict(state.titles)
    content = dict(state.content)
    graph = state.graph.copy()

    for note_id in action.ids:
        titles.pop(note_id, None)
        content.pop(note_id, None)
        graph.remove_node(note_id)

    return state.model_copy(update={"graph": graph, "titles": titles, "content": content})


def _fetching_content(state: State, action: FetchingContent, options: StoreConfig) -> State:
    content = dict(state.content)

    cached = content.get(action.id)
    if cached is None:
        content[action.id] = ContentEntry(status=ContentStatus.LOADING)
    else:
        content[action.id] = cached.model_copy(update={"status": ContentStatus.LOADING})

    return state.model_copy(update={"content": content})


def _set_content(state: State, action: SetContent, options: StoreConfig) -> State:
    if (
        options.drop_content_for_removed
        and action.id not in state.titles
        and not state.graph.has_node(action.id)
    ):
        logger.debug("Dropping content for unknown note {}", action.id)
        return state

    content = dict(state.content)

    cached = content.get(action.id)
    if cached is None:
        content[action.id] = ContentEntry(html=action.html, status=ContentStatus.LOADED)
    else:
        content[action.id] = cached.model_copy(
            update={"html": action.html, "status": ContentStatus.LOADED}
        )

    return state.model_copy(update={"content": content})


_HANDLERS = {
    Initialize: _initialize,
    Update: _update,
    Remove: _remove,
    FetchingContent: _fetching_content,
    SetContent: _set_content,
}

# Actions that need a prior initialize
_INCREMENTAL = (Update, Remove, FetchingContent, SetContent)


def reduce(state: State, action: Action, options: StoreConfig | None = None) -> State:
    """
    Apply one action to a state.

    Args:
        state: Current state (left untouched)
        action: Action to apply
        options: Reducer switches, defaults to StoreConfig()

    Returns:
        New state, or the same object for actions with no effect

    Raises:
        StateError: If an incremental action arrives before initialize,
            or the action type is unknown
        InvariantViolationError: If a link replacement finds the graph asymmetric
    """
    options = options or StoreConfig()

    # Building is a reserved hook; focus is navigation, not replica state
    if isinstance(action, (Building, Focus)):
        return state

    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise StateError(
            f"Unsupported action: {type(action).__name__}",
            context={"action": type(action).__name__},
        )

    if isinstance(action, _INCREMENTAL):
        _require_initialized(state, action)

    new_state = handler(state, action, options)

    if options.check_invariants and new_state.graph is not state.graph:
        new_state.graph.check_symmetry()

    return new_state


class StateStore:
    """
    Holder of the current replica state.

    Reductions run to completion one at a time. Subscribers are called
    after each commit with the previous and the new state; they are the
    place where rendering and fetch scheduling react to changes.
    """

    def __init__(self, options: StoreConfig | None = None, state: State | None = None):
        """
        Initialize the store.

        Args:
            options: Reducer switches
            state: Starting state (default: uninitialized)
        """
        self.options = options or StoreConfig()
        self._state = state or initial_state
        self._listeners: list[Listener] = []

    @property
    def state(self) -> State:
        return self._state

    def dispatch(self, action: Action) -> State:
        """
        Reduce an action into the current state and commit the result.

        Returns:
            The committed state

        Raises:
            StateError, InvariantViolationError: Propagated from reduce;
                nothing is committed in that case
        """
        previous = self._state
        current = reduce(previous, action, self.options)
        if current is previous:
            return current

        self._state = current
        logger.debug(
            "Committed {}",
            type(action).__name__,
            extra={
                "action": type(action).__name__,
                "nodes": current.graph.node_count,
                "edges": current.graph.edge_count,
            },
        )

        for listener in list(self._listeners):
            listener(previous, current)

        return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for committed state changes.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
