"""Tests for gadget port predicates and the Universal latch."""

from __future__ import annotations

import pytest

from nclctl.domain.types import GateKind
from nclctl.infrastructure.graph.engine import Graph
from nclctl.infrastructure.graph.gadgets import (
    GADGETS,
    CNFEvaluator,
    Converter,
    Existential,
    Universal,
)

QUANTIFIER_WEIGHTS = {
    "tryin": 2,
    "tryout": 2,
    "satin": 2,
    "satout": 2,
    "out": 1,
    "inv": 1,
}


def wire_quantifier(graph: Graph, kind: GateKind) -> None:
    """Place quantifier ``q`` with every port fed by a hidden vertex (all receiving)."""
    graph.add_component("q", (0, 0), kind, variable="x")
    for port, weight in QUANTIFIER_WEIGHTS.items():
        graph.add_vertex(f"h.{port}", visible=False)
        graph.add_edge(f"e.{port}", f"h.{port}", f"q.{port}", weight)


def drive(graph: Graph, *ports: str) -> None:
    """Flip the wires of *ports* so they point away from the gadget."""
    for port in ports:
        graph.reverse_edge(f"e.{port}")


def port_ok(graph: Graph, port: str) -> bool:
    return graph.get_vertex(f"q.{port}").constraint_satisfied


class TestDispatch:
    def test_closed_mapping(self) -> None:
        assert GADGETS == {
            GateKind.CONVERTER: Converter,
            GateKind.EXISTENTIAL: Existential,
            GateKind.UNIVERSAL: Universal,
            GateKind.CNF: CNFEvaluator,
        }

    def test_port_predicate_selected_by_gate(self, graph: Graph) -> None:
        graph.add_component("c", (0, 0), GateKind.CONVERTER)
        assert graph.get_vertex("c.port").gate is GateKind.CONVERTER


class TestConverter:
    def _build(self, graph: Graph) -> None:
        graph.add_component("c", (0, 0), GateKind.CONVERTER)
        graph.add_vertex("s", visible=False)
        graph.add_vertex("d", visible=False)
        graph.add_edge("single", "c.port", "s", 1)
        graph.add_edge("double", "c.port", "d", 2)

    def test_needs_some_inflow(self, graph: Graph) -> None:
        self._build(graph)
        assert not graph.get_vertex("c.port").constraint_satisfied
        graph.reverse_edge("single")
        assert graph.get_vertex("c.port").constraint_satisfied

    def test_double_alone_is_enough(self, graph: Graph) -> None:
        self._build(graph)
        graph.reverse_edge("double")
        assert graph.get_vertex("c.port").constraint_satisfied

    def test_wrong_arity(self, graph: Graph) -> None:
        graph.add_component("c", (0, 0), GateKind.CONVERTER)
        graph.add_vertex("d", visible=False)
        graph.add_edge("double", "d", "c.port", 2)
        assert not graph.get_vertex("c.port").constraint_satisfied


class TestExistential:
    @pytest.fixture
    def q(self, graph: Graph) -> Graph:
        wire_quantifier(graph, GateKind.EXISTENTIAL)
        return graph

    def test_idle_is_satisfied(self, q: Graph) -> None:
        assert q.get_component("q").constraint_satisfied

    def test_tryout_needs_tryin(self, q: Graph) -> None:
        drive(q, "tryout")
        assert port_ok(q, "tryout")
        drive(q, "tryin")
        assert not port_ok(q, "tryout")

    def test_tryout_forbids_both_branches(self, q: Graph) -> None:
        drive(q, "tryout", "out")
        assert port_ok(q, "tryout")
        drive(q, "inv")
        assert not port_ok(q, "tryout")

    def test_both_branches_allowed_while_idle(self, q: Graph) -> None:
        drive(q, "out", "inv")
        assert q.get_component("q").constraint_satisfied

    def test_satout_needs_satin(self, q: Graph) -> None:
        drive(q, "satout")
        assert port_ok(q, "satout")
        drive(q, "satin")
        assert not port_ok(q, "satout")

    def test_arity_is_per_port(self, q: Graph) -> None:
        q.add_vertex("extra", visible=False)
        q.add_edge("e.extra", "extra", "q.out", 1)
        assert not port_ok(q, "out")
        assert port_ok(q, "tryin")

    def test_label(self, q: Graph) -> None:
        assert q.get_component("q").label == "∃x"


class TestUniversal:
    @pytest.fixture
    def q(self, graph: Graph) -> Graph:
        wire_quantifier(graph, GateKind.UNIVERSAL)
        return graph

    @staticmethod
    def latch(graph: Graph) -> bool:
        component = graph.get_component("q")
        assert isinstance(component, Universal)
        return component.latch

    def test_starts_clear(self, q: Graph) -> None:
        assert self.latch(q) is False
        assert q.get_component("q").state == {"variable": "x", "latch": False}

    def test_tryout_needs_exactly_one_branch(self, q: Graph) -> None:
        drive(q, "tryout")
        assert not port_ok(q, "tryout")
        drive(q, "out")
        assert port_ok(q, "tryout")
        drive(q, "inv")
        assert not port_ok(q, "tryout")

    def test_satout_needs_latch(self, q: Graph) -> None:
        drive(q, "out", "satout")
        assert not port_ok(q, "satout")

    def test_set_on_inv_with_satisfied_feeder(self, q: Graph) -> None:
        drive(q, "inv")
        q.evaluate()
        assert self.latch(q) is True

    def test_set_requires_satisfied_feeder(self, graph: Graph) -> None:
        wire_quantifier(graph, GateKind.UNIVERSAL)
        graph.get_vertex("h.satin").visible = True
        drive(graph, "inv")
        graph.evaluate()
        assert self.latch(graph) is False

    def test_latch_enables_satout_on_out_branch(self, q: Graph) -> None:
        drive(q, "inv")
        q.evaluate()
        drive(q, "inv", "out", "satout")
        assert port_ok(q, "satout")

    def test_clear_when_tryin_not_receiving(self, q: Graph) -> None:
        drive(q, "inv")
        q.evaluate()
        drive(q, "inv", "tryin")
        q.evaluate()
        assert self.latch(q) is False

    def test_clear_wins_over_set(self, q: Graph) -> None:
        drive(q, "inv", "tryin")
        q.evaluate()
        assert self.latch(q) is False

    def test_no_request_keeps_latch(self, q: Graph) -> None:
        drive(q, "inv")
        q.evaluate()
        drive(q, "inv", "satin")
        q.evaluate()
        assert self.latch(q) is True

    def test_requests_commit_after_the_pass(self, q: Graph) -> None:
        drive(q, "inv", "out", "satout")
        first = q.evaluate()
        assert first[q.get_vertex("q.satout").id] is False
        assert self.latch(q) is True
        second = q.evaluate()
        assert second[q.get_vertex("q.satout").id] is True

    def test_rejected_move_leaves_latch(self, q: Graph) -> None:
        drive(q, "out")
        assert q.try_reverse_edge("e.tryout") is True
        # Driving inv too would give tryout two branches.
        assert q.try_reverse_edge("e.inv") is False
        component = q.get_component("q")
        assert isinstance(component, Universal)
        assert component.latch is False
        assert component.latch_requested is False

    def test_queries_do_not_request(self, q: Graph) -> None:
        drive(q, "inv")
        assert port_ok(q, "inv")
        assert q.get_component("q").constraint_satisfied
        component = q.get_component("q")
        assert isinstance(component, Universal)
        assert component.latch_requested is False
        q.evaluate()
        assert component.latch is True

    @staticmethod
    def _evaluated_both_ways(*ports: str, latched: bool) -> tuple[Graph, Graph, bool]:
        def build() -> Graph:
            g = Graph()
            wire_quantifier(g, GateKind.UNIVERSAL)
            if latched:
                drive(g, "inv")
                g.evaluate()
                drive(g, "inv")
            drive(g, *ports)
            return g

        forward, backward = build(), build()
        keys = list(forward.vertices)
        same = forward.evaluate(keys) == backward.evaluate(list(reversed(keys)))
        return forward, backward, same

    @pytest.mark.parametrize(
        ("ports", "latched", "expected"),
        [
            # SET only
            (("inv", "out", "satout"), False, True),
            # SET and CLEAR in the same pass
            (("inv", "tryin"), False, False),
            (("inv", "tryin"), True, False),
            # CLEAR only
            (("tryin",), True, False),
            # no request
            (("satin",), True, True),
        ],
    )
    def test_order_independent(self, ports: tuple[str, ...], latched: bool, expected: bool) -> None:
        forward, backward, same = self._evaluated_both_ways(*ports, latched=latched)
        assert same
        assert self.latch(forward) is self.latch(backward) is expected
        keys = list(forward.vertices)
        assert forward.evaluate() == backward.evaluate(list(reversed(keys)))


class TestCNFEvaluator:
    @pytest.fixture
    def f(self, graph: Graph) -> Graph:
        """Formula ``(a || !b)`` with every literal false and ``satisfied`` idle."""
        graph.add_component("f", (0, 0), GateKind.CNF, formula="(a || !b)")
        for port in ("a", "!a", "b", "!b"):
            graph.add_vertex(f"h.{port}", visible=False)
            graph.add_edge(f"e.{port}", f"f.{port}", f"h.{port}", 1)
        graph.add_vertex("h.sat", visible=False)
        graph.add_edge("e.sat", "h.sat", "f.satisfied", 2)
        return graph

    def test_layout(self, f: Graph) -> None:
        component = f.get_component("f")
        assert list(component.ports) == ["a", "!a", "b", "!b", "satisfied"]
        assert f.get_vertex("f.!b").position.x == 6
        assert f.get_vertex("f.satisfied").position.x == 10
        assert component.label == "(a ∨ ¬b)"

    def test_idle_output_always_satisfied(self, f: Graph) -> None:
        assert f.get_component("f").constraint_satisfied

    def test_output_needs_true_formula(self, f: Graph) -> None:
        f.reverse_edge("e.sat")
        assert not f.get_vertex("f.satisfied").constraint_satisfied
        f.reverse_edge("e.!b")
        assert f.get_vertex("f.satisfied").constraint_satisfied

    def test_literal_is_true_when_receiving(self, f: Graph) -> None:
        cnf = f.get_component("f")
        assert isinstance(cnf, CNFEvaluator)
        assert not cnf.formula_satisfied()
        f.reverse_edge("e.a")
        assert cnf.literal_true("a")
        assert cnf.formula_satisfied()
        assert cnf.state["formula_satisfied"] is True
