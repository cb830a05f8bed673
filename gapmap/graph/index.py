"""
Prerequisite Graph Index.

In-memory id -> node map with forward (prerequisite) and reverse (dependent)
adjacency. Built fresh per call from a caller-supplied snapshot; the index is
never mutated after construction, so the lazily derived reverse adjacency can
be cached on it safely.

Prerequisite ids that are not in the snapshot are dropped silently: upstream
data entry is expected to be imperfect.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Optional

from loguru import logger

from gapmap.core.errors import NodeNotFoundError
from gapmap.core.models import LearningNode


class GraphIndex:
    """
    Read-only index over a snapshot of learning nodes.

    Usage:
        graph = build_index(nodes)
        for neighbor in graph.neighbors(graph.require("photosynthesis")):
            ...
    """

    def __init__(self, nodes: Iterable[LearningNode]):
        self._nodes: dict[str, LearningNode] = {}
        for node in nodes:
            if node.id in self._nodes:
                logger.debug(f"Duplicate node id {node.id}; keeping the last definition")
            self._nodes[node.id] = node
        self._dependents: Optional[dict[str, list[LearningNode]]] = None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[LearningNode]:
        return iter(self._nodes.values())

    @property
    def ids(self) -> list[str]:
        return list(self._nodes)

    def get(self, node_id: str) -> Optional[LearningNode]:
        return self._nodes.get(node_id)

    def require(self, node_id: str) -> LearningNode:
        """Look up a node, raising NodeNotFoundError if it is absent."""
        node = self._nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def prerequisites_of(self, node: LearningNode) -> list[LearningNode]:
        """Known prerequisite nodes, in declaration order."""
        return [self._nodes[pid] for pid in node.prerequisites if pid in self._nodes]

    def dependents_of(self, node: LearningNode) -> list[LearningNode]:
        """Nodes that list this node as a prerequisite, in snapshot order."""
        if self._dependents is None:
            self._dependents = self._build_dependents()
        return list(self._dependents.get(node.id, []))

    def neighbors(self, node: LearningNode) -> list[LearningNode]:
        """
        Union of prerequisites and dependents.

        Excludes the node itself and any id missing from the index. Each
        neighbor appears once, prerequisites first.
        """
        seen: set[str] = {node.id}
        result: list[LearningNode] = []
        for candidate in self.prerequisites_of(node) + self.dependents_of(node):
            if candidate.id not in seen:
                seen.add(candidate.id)
                result.append(candidate)
        return result

    def _build_dependents(self) -> dict[str, list[LearningNode]]:
        dependents: dict[str, list[LearningNode]] = {}
        for node in self._nodes.values():
            for pid in node.prerequisites:
                dependents.setdefault(pid, []).append(node)
        return dependents


def build_index(nodes: Iterable[LearningNode]) -> GraphIndex:
    """Build an id -> node index in O(n)."""
    return GraphIndex(nodes)
