"""
Tests for SyncSession.

Covers in-order stream reduction, fault reporting, focus routing and
fetch deduplication against a fake content source.
"""

import asyncio
import json

import pytest

from notesync.config import StoreConfig
from notesync.core.state_store import StateStore
from notesync.models import ContentStatus
from notesync.services.sync_session import SyncSession
from notesync.utils.exceptions import (
    ContentFetchError,
    InvariantViolationError,
    MissingPayloadError,
    StateError,
    UnknownTagError,
)


class FakeContentSource:
    """Content source that records calls and can be held open or made to fail."""

    def __init__(self, pages: dict[str, str] | None = None, fail: bool = False):
        self.pages = pages or {}
        self.fail = fail
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None

    async def get_note_content(self, note_id: str) -> str:
        self.calls.append(note_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ContentFetchError("boom", context={"note_id": note_id})
        return self.pages[note_id]


async def stream(*messages):
    for message in messages:
        yield message


@pytest.fixture
def faults():
    return []


@pytest.fixture
def session(faults):
    return SyncSession(
        content_source=FakeContentSource({"a": "<p>A</p>", "b": "<p>B</p>"}),
        on_fault=faults.append,
    )


class TestHandleMessage:
    """Test single message handling."""

    def test_applies_initialize(self, session, initialize_message):
        """Test a valid message is reduced and committed."""
        state = session.handle_message(json.dumps(initialize_message))

        assert state is session.state
        assert state.initialized is True
        assert session.stats.applied == 1

    def test_decode_fault_is_reported_and_dropped(self, session, faults, initialize_message):
        """Test a missing payload is surfaced and processing continues."""
        session.handle_message(initialize_message)

        assert session.handle_message({"tag": "update"}) is None
        assert len(faults) == 1
        assert isinstance(faults[0], MissingPayloadError)
        assert session.state.titles == {"a": "A", "b": "B"}

        session.handle_message({"tag": "remove", "content": ["b"]})
        assert "b" not in session.state.titles

    def test_unknown_tag_counted_separately(self, session, faults):
        """Test fault counters are kept per kind."""
        session.handle_message({"tag": "nope"})
        session.handle_message({"tag": "update"})
        session.handle_message({"tag": "nope"})

        assert session.stats.faults == {"UnknownTagError": 2, "MissingPayloadError": 1}
        assert session.stats.fault_count == 3
        assert isinstance(faults[0], UnknownTagError)

    def test_update_before_initialize_is_reported(self, session, faults):
        """Test state faults are surfaced, not raised."""
        result = session.handle_message(
            {"tag": "update", "content": [{"id": "a", "title": "A", "links": []}]}
        )

        assert result is None
        assert isinstance(faults[0], StateError)
        assert session.state.initialized is False

    def test_focus_goes_to_navigation_hook(self, faults, initialize_message):
        """Test focus calls the hook and leaves state alone."""
        focused = []
        session = SyncSession(on_focus=focused.append, on_fault=faults.append)
        session.handle_message(initialize_message)
        before = session.state

        state = session.handle_message({"tag": "focus", "content": "b"})

        assert focused == ["b"]
        assert state is before
        assert faults == []

    def test_focus_without_hook(self, session):
        """Test focus is inert when no hook is set."""
        before = session.state

        assert session.handle_message({"tag": "focus", "content": "a"}) is before

    def test_building_is_inert(self, session, initialize_message):
        """Test building changes nothing."""
        session.handle_message(initialize_message)
        before = session.state

        assert session.handle_message({"tag": "building"}) is before

    def test_invariant_violation_propagates(self, faults, initialize_message):
        """Test a broken graph fails loudly instead of being reported."""
        session = SyncSession(
            store=StateStore(options=StoreConfig(replace_links_on_update=True)),
            on_fault=faults.append,
        )
        session.handle_message(initialize_message)
        session.state.graph.incoming["b"].discard("a")

        with pytest.raises(InvariantViolationError):
            session.handle_message(
                {"tag": "update", "content": [{"id": "a", "title": "A", "links": []}]}
            )
        assert faults == []

    def test_default_fault_observer_logs(self):
        """Test the default observer does not raise."""
        session = SyncSession()

        assert session.handle_message("garbage") is None
        assert session.stats.faults == {"MalformedMessageError": 1}


@pytest.mark.asyncio
class TestRun:
    """Test stream consumption."""

    async def test_processes_in_order(self, session, initialize_message):
        """Test messages are reduced in arrival order."""
        stats = await session.run(
            stream(
                json.dumps(initialize_message),
                {"tag": "update", "content": [{"id": "c", "title": "C", "links": ["a"]}]},
                {"tag": "update", "content": [{"id": "c", "title": "C2", "links": []}]},
                {"tag": "remove", "content": ["b"]},
            )
        )

        state = session.state
        assert stats.messages == 4
        assert stats.applied == 4
        assert state.titles == {"a": "A", "c": "C2"}
        assert state.graph.links("a") == frozenset()
        assert state.graph.backlinks("a") == {"c"}
        state.graph.check_symmetry()

    async def test_faults_do_not_stop_the_stream(self, session, faults, initialize_message):
        """Test a bad message in the middle is skipped."""
        stats = await session.run(
            stream(
                initialize_message,
                "{broken",
                {"tag": "remove", "content": ["a"]},
            )
        )

        assert stats.applied == 2
        assert stats.fault_count == 1
        assert "a" not in session.state.titles

    async def test_reinitialize_replaces(self, session, initialize_message):
        """Test a second snapshot replaces everything."""
        await session.run(
            stream(
                initialize_message,
                {"tag": "update", "content": [{"id": "z", "title": "Z", "links": []}]},
                {
                    "tag": "initialize",
                    "content": {"outgoing_links": {"q": []}, "titles": {"q": "Q"}, "default_note": "q"},
                },
            )
        )

        assert session.state.titles == {"q": "Q"}
        assert session.state.default_note_id == "q"


@pytest.mark.asyncio
class TestLoadContent:
    """Test fetch-on-demand driven by cache status."""

    async def test_loads_empty_note(self, session, initialize_message):
        """Test an unfetched note is fetched and stored."""
        session.handle_message(initialize_message)

        state = await session.load_content("b")

        assert state.content["b"].status == ContentStatus.LOADED
        assert state.content["b"].html == "<p>B</p>"
        assert session.content_source.calls == ["b"]

    async def test_skips_loaded_note(self, session, initialize_message):
        """Test fresh content is not refetched."""
        session.handle_message(initialize_message)
        await session.load_content("a")

        await session.load_content("a")

        assert session.content_source.calls == ["a"]
        assert session.stats.fetches == 1

    async def test_refetches_dirty_note(self, session, initialize_message):
        """Test an update makes loaded content fetchable again."""
        session.handle_message(initialize_message)
        await session.load_content("a")
        session.handle_message(
            {"tag": "update", "content": [{"id": "a", "title": "A", "links": ["b"]}]}
        )
        assert session.state.content_status("a") == ContentStatus.DIRTY

        await session.load_content("a")

        assert session.content_source.calls == ["a", "a"]
        assert session.state.content_status("a") == ContentStatus.LOADED

    async def test_concurrent_requests_fetch_once(self, session, initialize_message):
        """Test a second request while loading does not issue a fetch."""
        session.handle_message(initialize_message)
        source = session.content_source
        source.gate = asyncio.Event()

        first = asyncio.create_task(session.load_content("a"))
        await asyncio.sleep(0)
        assert session.state.content_status("a") == ContentStatus.LOADING

        second = await session.load_content("a")
        assert second.content_status("a") == ContentStatus.LOADING

        source.gate.set()
        await first

        assert source.calls == ["a"]
        assert session.state.content_status("a") == ContentStatus.LOADED

    async def test_messages_interleave_with_fetch(self, session, initialize_message):
        """Test a remove landing mid-fetch; the late content is upserted."""
        session.handle_message(initialize_message)
        source = session.content_source
        source.gate = asyncio.Event()

        task = asyncio.create_task(session.load_content("b"))
        await asyncio.sleep(0)
        session.handle_message({"tag": "remove", "content": ["b"]})
        source.gate.set()
        state = await task

        assert "b" not in state.titles
        assert state.content["b"].html == "<p>B</p>"

    async def test_fetch_fault_propagates(self, initialize_message):
        """Test fetch faults reach the caller and the entry stays loading."""
        session = SyncSession(content_source=FakeContentSource(fail=True))
        session.handle_message(initialize_message)

        with pytest.raises(ContentFetchError):
            await session.load_content("a")

        assert session.state.content_status("a") == ContentStatus.LOADING
        assert session.content_source.calls == ["a"]

    async def test_force_refetch(self, session, initialize_message):
        """Test force bypasses deduplication."""
        session.handle_message(initialize_message)
        await session.load_content("a")

        await session.load_content("a", force=True)

        assert session.content_source.calls == ["a", "a"]

    async def test_requires_content_source(self, initialize_message):
        """Test loading without a source is an error."""
        session = SyncSession()
        session.handle_message(initialize_message)

        with pytest.raises(StateError):
            await session.load_content("a")
