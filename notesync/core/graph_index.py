"""
In-memory link graph with dual adjacency.

Every note keeps an outgoing set (links) and an incoming set (backlinks).
For every pair of notes ``b in outgoing[a]`` holds exactly when
``a in incoming[b]``. All mutators keep both sides in step, and any id
referenced as an edge endpoint is created on demand, so the reverse
index is never partial.

The index is mutable. Callers that hand a graph to readers must mutate a
``copy()`` instead of the shared instance.
"""

from collections.abc import Iterable, Mapping

from notesync.utils.exceptions import InvariantViolationError


class GraphIndex:
    """Directed graph of note ids stored as outgoing and incoming adjacency sets."""

    def __init__(self):
        self.outgoing: dict[str, set[str]] = {}
        self.incoming: dict[str, set[str]] = {}

    @classmethod
    def from_outgoing(cls, outgoing: Mapping[str, Iterable[str]]) -> "GraphIndex":
        """
        Build a complete index from an outgoing adjacency snapshot.

        Ids that only appear as link targets still get an entry with no
        outgoing links so their backlinks stay addressable.

        Args:
            outgoing: Mapping of note id to the ids it links to

        Returns:
            New GraphIndex
        """
        graph = cls()
        for source, targets in outgoing.items():
            graph.add_node(source)
            for target in targets:
                graph.add_edge(source, target)
        return graph

    def copy(self) -> "GraphIndex":
        """Return an independent clone; no adjacency set is shared."""
        clone = GraphIndex()
        clone.outgoing = {i: set(js) for i, js in self.outgoing.items()}
        clone.incoming = {i: set(js) for i, js in self.incoming.items()}
        return clone

    # ═══════════════════════════════════════════════════════════
    # NODE & EDGE PRIMITIVES
    # ═══════════════════════════════════════════════════════════

    def has_node(self, i: str) -> bool:
        return i in self.outgoing

    def add_node(self, i: str) -> None:
        """Add ``i`` with empty adjacency. Existing nodes are left alone."""
        if i not in self.outgoing:
            self.outgoing[i] = set()
            self.incoming[i] = set()

    def add_edge(self, i: str, j: str) -> None:
        """Add the edge ``i -> j``, creating either endpoint if needed."""
        self.add_node(i)
        self.add_node(j)
        self.outgoing[i].add(j)
        self.incoming[j].add(i)

    def remove_edge(self, i: str, j: str) -> None:
        """Drop the edge ``i -> j``. Both nodes stay in the graph."""
        if i in self.outgoing:
            self.outgoing[i].discard(j)
        if j in self.incoming:
            self.incoming[j].discard(i)

    def remove_node(self, i: str) -> None:
        """Remove ``i`` and strip it from every neighbor's adjacency."""
        if i not in self.outgoing:
            return

        for j in self.outgoing[i]:
            if j != i:
                self.incoming[j].discard(i)
        for j in self.incoming[i]:
            if j != i:
                self.outgoing[j].discard(i)

        del self.outgoing[i]
        del self.incoming[i]

    # ═══════════════════════════════════════════════════════════
    # RECONCILIATION
    # ═══════════════════════════════════════════════════════════

    def reconcile_node(self, i: str, new_out: Iterable[str], new_in: Iterable[str]) -> None:
        """
        Set the complete outgoing and incoming adjacency of ``i``.

        Only neighbors whose relationship to ``i`` changed have their
        reverse sets touched. Running it twice with the same sets is a
        no-op. A self-loop exists afterwards iff ``i`` is in ``new_out``;
        ``new_in`` is aligned to that.

        Args:
            i: Node identifier
            new_out: Every id ``i`` should link to
            new_in: Every id that should link to ``i``

        Raises:
            InvariantViolationError: If the current adjacency of ``i`` is
                already asymmetric
        """
        self.check_node(i)

        new_out = set(new_out)
        new_in = set(new_in)
        if i in new_out:
            new_in.add(i)
        else:
            new_in.discard(i)

        old_out = self.outgoing.get(i, set())
        old_in = self.incoming.get(i, set())

        for t in old_out - new_out:
            if t != i:
                self.incoming[t].discard(i)
        for t in new_out - old_out:
            if t != i:
                self.add_node(t)
                self.incoming[t].add(i)

        for s in old_in - new_in:
            if s != i:
                self.outgoing[s].discard(i)
        for s in new_in - old_in:
            if s != i:
                self.add_node(s)
                self.outgoing[s].add(i)

        self.outgoing[i] = new_out
        self.incoming[i] = new_in

    def check_node(self, i: str) -> None:
        """
        Verify that the adjacency of ``i`` is mirrored by its neighbors.

        Raises:
            InvariantViolationError: On the first mismatch found
        """
        for t in self.outgoing.get(i, ()):
            if i not in self.incoming.get(t, ()):
                raise InvariantViolationError(
                    f"Edge {i} -> {t} missing from incoming index",
                    context={"source": i, "target": t},
                )
        for s in self.incoming.get(i, ()):
            if i not in self.outgoing.get(s, ()):
                raise InvariantViolationError(
                    f"Edge {s} -> {i} missing from outgoing index",
                    context={"source": s, "target": i},
                )

    def check_symmetry(self) -> None:
        """
        Audit the whole index.

        Raises:
            InvariantViolationError: If the two indices disagree anywhere
        """
        if self.outgoing.keys() != self.incoming.keys():
            raise InvariantViolationError(
                "Outgoing and incoming indices cover different nodes",
                context={
                    "outgoing_only": sorted(self.outgoing.keys() - self.incoming.keys()),
                    "incoming_only": sorted(self.incoming.keys() - self.outgoing.keys()),
                },
            )
        for i in self.outgoing:
            self.check_node(i)

    # ═══════════════════════════════════════════════════════════
    # QUERIES
    # ═══════════════════════════════════════════════════════════

    def links(self, i: str) -> frozenset[str]:
        """Ids that ``i`` links to (empty for unknown ids)."""
        return frozenset(self.outgoing.get(i, ()))

    def backlinks(self, i: str) -> frozenset[str]:
        """Ids that link to ``i`` (empty for unknown ids)."""
        return frozenset(self.incoming.get(i, ()))

    def to_outgoing(self) -> dict[str, list[str]]:
        """Export the outgoing adjacency, the inverse of from_outgoing."""
        return {i: sorted(js) for i, js in self.outgoing.items()}

    @property
    def node_count(self) -> int:
        return len(self.outgoing)

    @property
    def edge_count(self) -> int:
        return sum(len(js) for js in self.outgoing.values())

    def __contains__(self, i: object) -> bool:
        return i in self.outgoing

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GraphIndex):
            return NotImplemented
        return self.outgoing == other.outgoing and self.incoming == other.incoming

    def __repr__(self) -> str:
        return f"GraphIndex(nodes={self.node_count}, edges={self.edge_count})"
