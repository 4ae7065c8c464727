"""
Shared fixtures for notesync tests.
"""

import pytest

from notesync.core.state_store import State, StateStore, initial_state, reduce
from notesync.models.actions import FetchingContent, Initialize, SetContent


def _assert_symmetric(graph) -> None:
    """Check b in outgoing[a] <=> a in incoming[b] for every pair."""
    for a, targets in graph.outgoing.items():
        for b in targets:
            assert a in graph.incoming[b], f"{a} -> {b} missing from incoming[{b}]"
    for b, sources in graph.incoming.items():
        for a in sources:
            assert b in graph.outgoing[a], f"{a} -> {b} missing from outgoing[{a}]"
    assert graph.outgoing.keys() == graph.incoming.keys()


@pytest.fixture
def assert_symmetric():
    """Symmetry check that does not go through GraphIndex.check_symmetry."""
    return _assert_symmetric


@pytest.fixture
def initialize_action() -> Initialize:
    """Snapshot with a single link a -> b."""
    return Initialize(
        outgoing_links={"a": ["b"]},
        titles={"a": "A", "b": "B"},
        default_note_id="a",
    )


@pytest.fixture
def initialized_state(initialize_action) -> State:
    """State right after the a -> b snapshot."""
    return reduce(initial_state, initialize_action)


@pytest.fixture
def loaded_state(initialized_state) -> State:
    """Initialized state with loaded content for note a."""
    state = reduce(initialized_state, FetchingContent(id="a"))
    return reduce(state, SetContent(id="a", html="<p>A</p>"))


@pytest.fixture
def store(initialize_action) -> StateStore:
    """Store that has applied the a -> b snapshot."""
    store = StateStore()
    store.dispatch(initialize_action)
    return store


@pytest.fixture
def initialize_message() -> dict:
    """Wire form of the a -> b snapshot."""
    return {
        "tag": "initialize",
        "content": {
            "outgoing_links": {"a": ["b"]},
            "titles": {"a": "A", "b": "B"},
            "default_note": "a",
        },
    }
