"""Tests for the Graph registry: factories, cascade, notification, evaluation."""

from __future__ import annotations

import pytest

from nclctl.domain.errors import (
    DuplicateIdError,
    FormatError,
    NclError,
    NotFoundError,
    ReferentialError,
)
from nclctl.domain.geometry import Point
from nclctl.domain.ids import ElementId
from nclctl.domain.types import Align, GateKind
from nclctl.infrastructure.graph.engine import Graph


class TestVertices:
    def test_add_and_get(self, graph: Graph) -> None:
        v = graph.add_vertex("a", (1, 2))
        assert graph.get_vertex("a") is v
        assert graph.has_vertex(ElementId(("a",)))
        assert v.position == Point(1, 2)
        assert v.gate is GateKind.PLAIN

    def test_duplicate(self, graph: Graph) -> None:
        graph.add_vertex("a")
        with pytest.raises(DuplicateIdError):
            graph.add_vertex("a")

    def test_missing(self, graph: Graph) -> None:
        with pytest.raises(NotFoundError):
            graph.get_vertex("nope")
        with pytest.raises(KeyError):
            graph.remove_vertex("nope")

    def test_remove_cascades_edges(self, triangle: Graph) -> None:
        triangle.remove_vertex("a")
        assert set(map(str, triangle.edges)) == {"bc"}
        assert list(triangle.get_vertex("b").edge_ids) == [ElementId(("bc",))]

    def test_remove_port_rejected(self, graph: Graph) -> None:
        graph.add_component("conv", (0, 0), GateKind.CONVERTER)
        with pytest.raises(ReferentialError):
            graph.remove_vertex("conv.port")
        assert graph.has_vertex("conv.port")


class TestEdges:
    def test_add_registers_on_endpoints(self, graph: Graph) -> None:
        graph.add_vertex("a")
        graph.add_vertex("b")
        e = graph.add_edge("ab", "a", "b", 2)
        assert e.weight == 2
        assert ElementId(("ab",)) in graph.get_vertex("a").edge_ids
        assert ElementId(("ab",)) in graph.get_vertex("b").edge_ids

    def test_missing_endpoint(self, graph: Graph) -> None:
        graph.add_vertex("a")
        with pytest.raises(ReferentialError):
            graph.add_edge("ab", "a", "b")
        assert not graph.has_edge("ab")
        assert not graph.get_vertex("a").edge_ids

    @pytest.mark.parametrize("weight", [0, 3, -1, "heavy", "2", 1.5, 2.0, True])
    def test_bad_weight(self, graph: Graph, weight: object) -> None:
        graph.add_vertex("a")
        with pytest.raises(FormatError):
            graph.add_edge("aa", "a", "a", weight)  # type: ignore[arg-type]

    def test_duplicate(self, triangle: Graph) -> None:
        with pytest.raises(DuplicateIdError):
            triangle.add_edge("ab", "a", "b")

    def test_weight_is_read_only(self, triangle: Graph) -> None:
        with pytest.raises(AttributeError):
            triangle.get_edge("ab").weight = 1  # type: ignore[misc]

    def test_reverse_twice_restores(self, triangle: Graph) -> None:
        edge = triangle.get_edge("ab")
        before = (edge.from_id, edge.to_id)
        triangle.reverse_edge("ab")
        assert (edge.to_id, edge.from_id) == before
        triangle.reverse_edge("ab")
        assert (edge.from_id, edge.to_id) == before

    def test_remove_edge(self, triangle: Graph) -> None:
        triangle.remove_edge("ab")
        assert not triangle.has_edge("ab")
        assert ElementId(("ab",)) not in triangle.get_vertex("a").edge_ids


class TestComponents:
    def test_ports_created_and_bound(self, graph: Graph) -> None:
        q = graph.add_component("q", (2, 0), GateKind.UNIVERSAL, variable="x")
        assert set(q.ports) == {"tryin", "tryout", "satin", "satout", "out", "inv"}
        port = graph.get_vertex("q.tryin")
        assert port.gate is GateKind.UNIVERSAL
        assert port.component_id == ElementId(("q",))
        assert port.position == Point(2, 1)

    def test_unknown_kind(self, graph: Graph) -> None:
        with pytest.raises(FormatError):
            graph.add_component("g", (0, 0), "nand")
        with pytest.raises(FormatError):
            graph.add_component("g", (0, 0), GateKind.PLAIN)
        assert not graph.vertices

    def test_bad_config_creates_nothing(self, graph: Graph) -> None:
        with pytest.raises(FormatError):
            graph.add_component("f", (0, 0), GateKind.CNF, formula="(x")
        with pytest.raises(FormatError):
            graph.add_component("q", (0, 0), GateKind.EXISTENTIAL, variable="xy")
        with pytest.raises(FormatError):
            graph.add_component("c", (0, 0), GateKind.CONVERTER, colour="red")
        assert not graph.vertices
        assert not graph.components

    def test_port_collision_rolls_back(self, graph: Graph) -> None:
        graph.add_vertex("q.out")
        with pytest.raises(DuplicateIdError):
            graph.add_component("q", (0, 0), GateKind.EXISTENTIAL, variable="x")
        assert set(map(str, graph.vertices)) == {"q.out"}
        assert not graph.has_component("q")

    def test_remove_component_cascades(self, graph: Graph) -> None:
        graph.add_component("conv", (0, 0), GateKind.CONVERTER)
        graph.add_vertex("a")
        graph.add_edge("e", "a", "conv.port", 2)
        graph.remove_component("conv")
        assert not graph.has_vertex("conv.port")
        assert not graph.has_edge("e")
        assert not graph.get_vertex("a").edge_ids


class TestLabels:
    def test_add_and_remove(self, graph: Graph) -> None:
        label = graph.add_label("title", (0, -1), "NCL", "left", "top")
        assert label.halign is Align.LEFT
        assert label.valign is Align.TOP
        graph.remove_label("title")
        assert not graph.has_label("title")

    def test_bad_alignment(self, graph: Graph) -> None:
        with pytest.raises(FormatError):
            graph.add_label("t", (0, 0), "x", "middle")


class TestNotification:
    def test_each_mutation_notifies_once(self) -> None:
        calls: list[int] = []
        g = Graph(on_change=lambda graph: calls.append(graph.version))
        g.add_vertex("a")
        g.add_vertex("b")
        g.add_edge("ab", "a", "b")
        g.reverse_edge("ab")
        assert calls == [1, 2, 3, 4]

    def test_component_coalesces_port_creation(self) -> None:
        calls: list[Graph] = []
        g = Graph(on_change=calls.append)
        g.add_component("q", (0, 0), GateKind.EXISTENTIAL, variable="x")
        assert len(calls) == 1

    def test_cascade_coalesced(self, triangle: Graph) -> None:
        calls: list[Graph] = []
        triangle._on_change = calls.append
        triangle.remove_vertex("a")
        assert len(calls) == 1

    def test_failed_call_does_not_notify(self) -> None:
        calls: list[Graph] = []
        g = Graph(on_change=calls.append)
        g.add_vertex("a")
        calls.clear()
        g.consume_dirty()
        with pytest.raises(NclError):
            g.add_vertex("a")
        with pytest.raises(NclError):
            g.add_edge("ab", "a", "missing")
        with pytest.raises(NclError):
            g.add_component("bad", (0, 0), "nand")
        assert calls == []
        assert not g.dirty

    def test_dirty_flag(self, graph: Graph) -> None:
        graph.add_vertex("a")
        assert graph.consume_dirty()
        assert not graph.consume_dirty()

    def test_batch_groups_caller_mutations(self) -> None:
        calls: list[Graph] = []
        g = Graph(on_change=calls.append)
        with g.batch():
            g.add_vertex("a")
            g.add_vertex("b")
        assert len(calls) == 1


class TestEvaluation:
    def test_triangle_satisfied(self, triangle: Graph) -> None:
        assert all(triangle.evaluate().values())
        assert triangle.unsatisfied() == []

    def test_reversal_breaks_inflow(self, triangle: Graph) -> None:
        triangle.reverse_edge("ab")
        assert [str(v) for v in triangle.unsatisfied()] == ["b"]

    def test_order_argument(self, triangle: Graph) -> None:
        result = triangle.evaluate(["c", "a"])
        assert [str(k) for k in result] == ["c", "a"]

    def test_try_reverse_rejects_illegal_move(self, triangle: Graph) -> None:
        assert triangle.try_reverse_edge("ab") is False
        edge = triangle.get_edge("ab")
        assert str(edge.from_id) == "a"

    def test_try_reverse_keeps_legal_move(self, graph: Graph) -> None:
        graph.add_vertex("a")
        graph.add_vertex("b", visible=False)
        graph.add_edge("loop", "a", "a", 2)
        graph.add_edge("ab", "a", "b", 2)
        assert graph.try_reverse_edge("ab") is True
        assert str(graph.get_edge("ab").from_id) == "b"


class TestQueries:
    def test_bounds(self, triangle: Graph) -> None:
        assert triangle.bounds.min == Point(0, 0)
        assert triangle.bounds.max == Point(2, 2)

    def test_empty_bounds(self, graph: Graph) -> None:
        assert graph.bounds.size == Point()

    def test_nearest_edge(self, triangle: Graph) -> None:
        assert str(triangle.nearest_edge((1, 0.1)).id) == "ab"
        assert triangle.nearest_edge((10, 10)) is None

    def test_nearest_edge_skips_self_loops(self, graph: Graph) -> None:
        graph.add_vertex("a")
        graph.add_edge("loop", "a", "a")
        assert graph.nearest_edge((0, 0)) is None

    def test_views_are_read_only(self, triangle: Graph) -> None:
        with pytest.raises(TypeError):
            triangle.vertices[ElementId(("z",))] = None  # type: ignore[index]

    def test_clear(self, triangle: Graph) -> None:
        triangle.add_label("l", (0, 0), "x")
        triangle.clear()
        assert not (triangle.vertices or triangle.edges or triangle.labels)

    def test_to_networkx(self, triangle: Graph) -> None:
        g = triangle.to_networkx()
        assert g.number_of_nodes() == 3
        assert g.number_of_edges() == 3
        assert g.has_edge("a", "b", key="ab")
        assert g.nodes["a"]["gate"] == "plain"
