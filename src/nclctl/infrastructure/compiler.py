"""QBF → NCL circuit compiler.

Structural translation: one quantifier gadget per bound variable (left to
right in binding order), one CNF gadget below them, weight-2 ``try`` and
``sat`` chains between neighbouring quantifiers, and fixed boundary
circuitry:

- left: a ``source`` vertex with a weight-2 self-loop feeding the first
  ``tryin``, and a 3-cycle weight-2 sink on the first ``satout`` (the
  target edge ``goal``);
- right: converters ``conv.try`` and ``conv.result`` joined at a
  ``junction`` vertex that feeds the last ``satin``. The "try out" probe
  watches the last ``tryout``, the "result" probe watches the CNF
  ``satisfied`` port.

Every signal wire is created inactive (pointing back toward its driver),
so a freshly compiled circuit satisfies every constraint.

Compilation is all-or-nothing: on any failure the graph is left empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from nclctl.domain.errors import FormatError
from nclctl.domain.geometry import Point
from nclctl.domain.ids import ElementId
from nclctl.domain.qbf import QuantifiedFormula, parse_qbf
from nclctl.domain.types import Align, GateKind, QuantifierKind, Weight
from nclctl.infrastructure.graph.engine import Graph
from nclctl.infrastructure.graph.gadgets import CNFEvaluator

logger = logging.getLogger(__name__)

QUANTIFIER_SPACING = 5.0
CNF_OFFSET = Point(2.0, 5.0)

PROBE_TRY_OUT = "try out"
PROBE_RESULT = "result"

_KIND_FOR_QUANTIFIER = {
    QuantifierKind.EXISTS: GateKind.EXISTENTIAL,
    QuantifierKind.FORALL: GateKind.UNIVERSAL,
}


@dataclass(frozen=True)
class Probe:
    """An observable wire: active while *edge_id* points away from *driver_id*."""

    edge_id: ElementId
    driver_id: ElementId


@dataclass
class QbfCircuit:
    """Handle on a compiled circuit and its observable wires."""

    graph: Graph
    qbf: QuantifiedFormula
    quantifier_ids: tuple[ElementId, ...]
    cnf_id: ElementId
    target_id: ElementId
    probes: dict[str, Probe] = field(default_factory=dict)

    def probe_active(self, name: str) -> bool:
        probe = self.probes[name]
        return self.graph.get_edge(probe.edge_id).from_id == probe.driver_id

    @property
    def solved(self) -> bool:
        """The first quantifier's ``satout`` drives into the sink."""
        first = self.quantifier_ids[0]
        return self.graph.get_edge(self.target_id).from_id == first.child("satout")


def quantifier_id(variable: str) -> ElementId:
    return ElementId(("q_" + variable,))


class _CircuitBuilder:
    def __init__(self, graph: Graph, qbf: QuantifiedFormula) -> None:
        self.graph = graph
        self.qbf = qbf
        self.quantifiers: list[ElementId] = []
        self.cnf_id = ElementId(("cnf",))

    def wire(
        self, name: str, driver: ElementId, receiver: ElementId, weight: Weight
    ) -> ElementId:
        """Add an inactive wire: oriented from *receiver* back to *driver*."""
        edge = self.graph.add_edge(ElementId.parse(name), receiver, driver, weight)
        return edge.id

    def build(self) -> QbfCircuit:
        self._place_quantifiers()
        cnf = self._place_cnf()
        self._check_variables(cnf)
        self._wire_variables(cnf)
        self._wire_chains()
        self._wire_source_and_sink()
        probes = self._wire_result()
        return QbfCircuit(
            graph=self.graph,
            qbf=self.qbf,
            quantifier_ids=tuple(self.quantifiers),
            cnf_id=self.cnf_id,
            target_id=ElementId(("goal",)),
            probes=probes,
        )

    def _place_quantifiers(self) -> None:
        for i, quantifier in enumerate(self.qbf.quantifiers):
            qid = quantifier_id(quantifier.variable)
            self.graph.add_component(
                qid,
                Point(2.0 + i * QUANTIFIER_SPACING, 0.0),
                _KIND_FOR_QUANTIFIER[quantifier.kind],
                variable=quantifier.variable,
            )
            self.quantifiers.append(qid)

    def _place_cnf(self) -> CNFEvaluator:
        cnf = self.graph.add_component(
            self.cnf_id, CNF_OFFSET, GateKind.CNF, formula=self.qbf.formula
        )
        assert isinstance(cnf, CNFEvaluator)
        return cnf

    def _check_variables(self, cnf: CNFEvaluator) -> None:
        used = cnf.formula.variables
        if len(used) != len(self.quantifiers):
            msg = (
                f"Formula uses {len(used)} variable(s) but the prefix binds "
                f"{len(self.quantifiers)}"
            )
            raise FormatError(msg)
        unbound = [v for v in used if v not in self.qbf.variables]
        if unbound:
            msg = f"Unbound variable(s) in formula: {', '.join(unbound)}"
            raise FormatError(msg)

    def _wire_variables(self, cnf: CNFEvaluator) -> None:
        for variable in cnf.formula.variables:
            qid = quantifier_id(variable)
            self.wire(
                f"wire.{variable}.out",
                qid.child("out"),
                cnf.ports[variable],
                Weight.SINGLE,
            )
            self.wire(
                f"wire.{variable}.inv",
                qid.child("inv"),
                cnf.ports[f"!{variable}"],
                Weight.SINGLE,
            )

    def _wire_chains(self) -> None:
        for i, (left, right) in enumerate(zip(self.quantifiers, self.quantifiers[1:])):
            self.wire(f"try.{i}", left.child("tryout"), right.child("tryin"), Weight.DOUBLE)
            self.wire(f"sat.{i}", right.child("satout"), left.child("satin"), Weight.DOUBLE)

    def _wire_source_and_sink(self) -> None:
        first = self.quantifiers[0]
        g = self.graph

        source = g.add_vertex("source", Point(0.0, 1.0))
        g.add_edge("source.loop", source.id, source.id, Weight.DOUBLE)
        self.wire("start", source.id, first.child("tryin"), Weight.DOUBLE)

        sink = [
            g.add_vertex(f"sink.{i}", pos).id
            for i, pos in enumerate((Point(0.0, 2.5), Point(-1.0, 3.5), Point(0.5, 4.0)))
        ]
        for i in range(3):
            g.add_edge(f"sink.loop.{i}", sink[i], sink[(i + 1) % 3], Weight.DOUBLE)
        self.wire("goal", first.child("satout"), sink[0], Weight.DOUBLE)

    def _wire_result(self) -> dict[str, Probe]:
        g = self.graph
        last = self.quantifiers[-1]
        x = 2.0 + (len(self.quantifiers) - 1) * QUANTIFIER_SPACING + 3.0

        conv_try = g.add_component("conv.try", Point(x + 2.0, 1.0), GateKind.CONVERTER)
        conv_result = g.add_component("conv.result", Point(x + 2.0, 3.0), GateKind.CONVERTER)
        junction = g.add_vertex("junction", Point(x + 3.0, 2.0))

        try_port = conv_try.ports["port"]
        result_port = conv_result.ports["port"]
        satisfied_port = self.cnf_id.child("satisfied")

        probe_try = self.wire("probe.tryout", last.child("tryout"), try_port, Weight.DOUBLE)
        probe_result = self.wire("probe.result", satisfied_port, result_port, Weight.DOUBLE)
        self.wire("junction.try", try_port, junction.id, Weight.SINGLE)
        self.wire("junction.result", result_port, junction.id, Weight.SINGLE)
        self.wire("finish", junction.id, last.child("satin"), Weight.DOUBLE)

        g.add_label("label.try", Point(x + 2.0, 0.5), PROBE_TRY_OUT, Align.CENTER, Align.BOTTOM)
        g.add_label("label.result", Point(x + 2.0, 3.5), PROBE_RESULT, Align.CENTER, Align.TOP)

        return {
            PROBE_TRY_OUT: Probe(probe_try, last.child("tryout")),
            PROBE_RESULT: Probe(probe_result, satisfied_port),
        }


def compile_qbf(text: str, graph: Graph | None = None) -> QbfCircuit:
    """Compile a QBF string into a wired NCL circuit.

    *graph* is cleared first; a new graph is created when omitted.

    Raises:
        FormatError: malformed QBF, or the formula's variables do not
            match the quantifier prefix. The graph is left empty.
    """
    target = graph if graph is not None else Graph()
    target.clear()
    try:
        qbf = parse_qbf(text)
        with target.batch():
            circuit = _CircuitBuilder(target, qbf).build()
    except Exception:
        target.clear()
        raise

    logger.debug(
        "Compiled %r: %d quantifier(s), %d vertices, %d edges",
        qbf.text,
        len(circuit.quantifier_ids),
        len(target.vertices),
        len(target.edges),
    )
    return circuit
