"""
Synchronization core for notesync.

- GraphIndex: dual adjacency link graph with edge reconciliation
- State, StateStore, reduce: replica state and its reducer
- EventDecoder: inbound message to action mapping
"""

from notesync.core.decoder import EventDecoder
from notesync.core.graph_index import GraphIndex
from notesync.core.state_store import State, StateStore, initial_state, reduce

__all__ = [
    "GraphIndex",
    "State",
    "StateStore",
    "initial_state",
    "reduce",
    "EventDecoder",
]
