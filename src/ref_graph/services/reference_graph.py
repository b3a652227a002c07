"""
Reference graph over a walked commit range.

Every observed commit gets a dense node index in order of first appearance.
Edges are stored as reverse adjacency: for each target node, the list of
(source node, RefType) pairs of commits that reference it. The graph is
built in a single pass over commits ordered oldest to newest and is
read-only afterwards.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models import CommitRecord, RefType
from .commit_resolver import CommitResolver
from .reference_extractor import extract_references

logger = logging.getLogger(__name__)

Edge = Tuple[int, RefType]


class TraversalContext:
    """Scratch state for reachability queries.

    A node counts as visited in the current query iff its stored epoch equals
    the current one, so the visited array never has to be cleared between
    queries. Not thread safe: queries sharing a context must be serialized.
    """

    def __init__(self) -> None:
        self.epoch = 0
        self.visited: List[int] = []

    def begin(self, node_count: int) -> int:
        """Start a new query over a graph with node_count nodes."""
        if len(self.visited) < node_count:
            self.visited.extend([0] * (node_count - len(self.visited)))
        self.epoch += 1
        return self.epoch


class ReferenceGraph:
    """Commits of a range and the references between them."""

    def __init__(self) -> None:
        self._referenced_by: List[List[Edge]] = []
        self._hash_to_id: Dict[str, int] = {}
        self._commits: List[CommitRecord] = []

    @classmethod
    def build(
        cls, commits: Iterable[CommitRecord], resolver: CommitResolver
    ) -> "ReferenceGraph":
        """Build a graph from commits ordered oldest to newest.

        The order is not checked. References to commits that have not been
        observed yet are dropped, so a newest-first feed yields no edges.
        """
        graph = cls()
        for commit in commits:
            graph.ingest(commit, resolver)
        logger.info(
            f"Reference graph built: {graph.node_count} commits, "
            f"{graph.edge_count} references"
        )
        return graph

    def ingest(self, commit: CommitRecord, resolver: CommitResolver) -> int:
        """Add one commit and the references it makes; return its node index."""
        node = self.lookup_or_alloc(commit)

        added: Dict[int, RefType] = {}
        for mention in extract_references(commit):
            target = resolver.resolve(mention, referrer=commit)
            if target is None:
                continue

            target_node = self.lookup(target.oid)
            if target_node is None:
                logger.info(
                    f"Commit {commit.oid} references a commit {target.oid}, "
                    f"that has not been observed. It is outside the search "
                    f"region or the commit order is wrong."
                )
                continue

            if target_node in added:
                added[target_node] = RefType.strongest(
                    added[target_node], mention.ref_type
                )
            else:
                added[target_node] = mention.ref_type

        for target_node, ref_type in added.items():
            self._referenced_by[target_node].append((node, ref_type))
            logger.debug(f"Adding ref: {target_node} -> {node}, type {ref_type.name}")

        return node

    def lookup(self, oid: str) -> Optional[int]:
        return self._hash_to_id.get(oid)

    def lookup_or_alloc(self, commit: CommitRecord) -> int:
        node = self.lookup(commit.oid)
        if node is not None:
            return node

        node = len(self._commits)
        self._commits.append(commit)
        self._referenced_by.append([])
        self._hash_to_id[commit.oid] = node
        return node

    @property
    def node_count(self) -> int:
        return len(self._commits)

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self._referenced_by)

    @property
    def commits(self) -> Sequence[CommitRecord]:
        """Observed commits in node index order."""
        return tuple(self._commits)

    def commit_at(self, node: int) -> CommitRecord:
        return self._commits[node]

    def referenced_by(self, node: int) -> Sequence[Edge]:
        """Direct references to a node, in ingestion order."""
        return tuple(self._referenced_by[node])

    def reachable_from(
        self,
        node: int,
        include_notes: bool,
        context: Optional[TraversalContext] = None,
    ) -> List[int]:
        """Return every node that references node, directly or transitively.

        FIX and REVERT edges are always followed, NOTE edges only with
        include_notes. The start node is excluded and each node appears at
        most once, in discovery order.
        """
        if context is None:
            context = TraversalContext()
        epoch = context.begin(self.node_count)
        visited = context.visited

        result = []
        stack = [node]
        visited[node] = epoch

        while stack:
            current = stack.pop()
            for source, ref_type in self._referenced_by[current]:
                if visited[source] != epoch and ref_type.should_follow(include_notes):
                    visited[source] = epoch
                    stack.append(source)
                    result.append(source)

        return result

    def get_references(
        self,
        oid: str,
        include_notes: bool,
        context: Optional[TraversalContext] = None,
    ) -> List[CommitRecord]:
        """Commits that reference the commit oid, directly or transitively."""
        node = self.lookup(oid)
        if node is None:
            logger.info(f"Commit with hash {oid} not found, someone may still blame it")
            return []
        return [
            self._commits[source]
            for source in self.reachable_from(node, include_notes, context)
        ]
