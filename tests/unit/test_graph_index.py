"""
Unit tests for the prerequisite graph index.
"""

import pytest

from gapmap.core.errors import NodeNotFoundError
from gapmap.core.models import Layer
from gapmap.graph.index import build_index


class TestNeighbors:
    def test_union_of_prerequisites_and_dependents(self, abc_nodes):
        graph = build_index(abc_nodes)
        b = graph.require("B")
        assert [n.id for n in graph.neighbors(b)] == ["A", "C"]

    def test_root_node_only_has_dependents(self, abc_nodes):
        graph = build_index(abc_nodes)
        assert [n.id for n in graph.neighbors(graph.require("A"))] == ["B"]

    def test_dangling_prerequisites_are_dropped(self, node_factory):
        graph = build_index([
            node_factory("A", 1),
            node_factory("B", 2, prerequisites=["A", "ghost"]),
        ])
        b = graph.require("B")
        assert [n.id for n in graph.prerequisites_of(b)] == ["A"]
        assert [n.id for n in graph.neighbors(b)] == ["A"]

    def test_self_reference_is_excluded(self, node_factory):
        graph = build_index([node_factory("loop", 3, prerequisites=["loop"])])
        assert graph.neighbors(graph.require("loop")) == []

    def test_cycle_neighbors_are_not_duplicated(self, node_factory):
        graph = build_index([
            node_factory("A", 2, prerequisites=["B"]),
            node_factory("B", 3, prerequisites=["A"]),
        ])
        assert [n.id for n in graph.neighbors(graph.require("A"))] == ["B"]

    def test_dependents_in_snapshot_order(self, curriculum_nodes):
        graph = build_index(curriculum_nodes)
        basic = graph.require("basic_vocabulary")
        assert [n.id for n in graph.dependents_of(basic)] == [
            "elementary_concept",
            "intermediate_vocabulary",
        ]


class TestLookup:
    def test_require_unknown_raises(self, abc_nodes):
        graph = build_index(abc_nodes)
        with pytest.raises(NodeNotFoundError) as exc:
            graph.require("Z")
        assert exc.value.node_id == "Z"
        assert exc.value.status_code == 404

    def test_get_unknown_returns_none(self, abc_nodes):
        assert build_index(abc_nodes).get("Z") is None

    def test_duplicate_ids_keep_last_definition(self, node_factory):
        graph = build_index([node_factory("A", 1), node_factory("A", 9, Layer.L3)])
        assert len(graph) == 1
        assert graph.require("A").difficulty == 9

    def test_membership_and_iteration(self, abc_nodes):
        graph = build_index(abc_nodes)
        assert "B" in graph
        assert "Z" not in graph
        assert graph.ids == ["A", "B", "C"]
        assert [n.id for n in graph] == ["A", "B", "C"]
