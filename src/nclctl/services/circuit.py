"""CircuitService: compile, inspect and play NCL circuits.

Each operation works on the service's graph, replacing its contents, and
reports a JSON-friendly snapshot: element counts, bounds, gadget state,
probe wires and the vertices that fail the current validation pass.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import networkx as nx

from nclctl.domain.errors import FormatError, NclError
from nclctl.infrastructure.compiler import QbfCircuit, compile_qbf
from nclctl.infrastructure.graph.engine import Graph
from nclctl.infrastructure.graph.gadgets import Universal
from nclctl.infrastructure.loader import LoadReport, load_graph, load_graph_file
from nclctl.services.base import BaseService
from nclctl.services.result import CircuitSummary, Counts, MoveRecord, ServiceResult
from nclctl.services.telemetry import trace_span, traced


def graph_counts(graph: Graph) -> Counts:
    return {
        "components": len(graph.components),
        "vertices": len(graph.vertices),
        "edges": len(graph.edges),
        "labels": len(graph.labels),
    }


def circuit_summary(circuit: QbfCircuit) -> CircuitSummary:
    """Formula, quantifier gadgets and probe wires of a compiled circuit."""
    qbf = circuit.qbf
    cnf = circuit.graph.get_component(circuit.cnf_id)
    return {
        "qbf": qbf.text,
        "prefix": " ".join(str(q) for q in qbf.quantifiers),
        "formula": cnf.label,
        "variables": list(qbf.variables),
        "quantifiers": [str(q) for q in circuit.quantifier_ids],
        "target": str(circuit.target_id),
        "probes": {
            name: {"edge": str(probe.edge_id), "active": circuit.probe_active(name)}
            for name, probe in circuit.probes.items()
        },
        "solved": circuit.solved,
    }


class CircuitService(BaseService):
    """Operations over one constraint graph."""

    # ------------------------------------------------------------------
    # compile
    # ------------------------------------------------------------------

    @traced
    def compile(self, text: str) -> ServiceResult:
        """Compile a QBF string and summarise the resulting circuit."""
        try:
            with trace_span("compile_qbf") as span:
                circuit = compile_qbf(text, self._graph)
                if span:
                    span.annotate("vertices", len(self._graph.vertices))
            with trace_span("evaluate"):
                unsatisfied = self._graph.unsatisfied()
        except NclError as exc:
            return self._failure("compile", exc, qbf=text)

        return ServiceResult(
            ok=True,
            op="compile",
            data={
                **circuit_summary(circuit),
                "counts": graph_counts(self._graph),
                "truth": circuit.qbf.truth(),
                "unsatisfied": [str(v) for v in unsatisfied],
            },
        )

    # ------------------------------------------------------------------
    # inspect
    # ------------------------------------------------------------------

    @traced
    def inspect(self, path: Path, *, strict: bool = False) -> ServiceResult:
        """Load a graph description file and report on its structure."""
        try:
            with trace_span("load"):
                report = load_graph_file(self._graph, path, strict=strict)
            with trace_span("evaluate"):
                unsatisfied = self._graph.unsatisfied()
        except (NclError, OSError) as exc:
            return self._failure("inspect", exc, path=path)

        bounds = self._graph.bounds
        data: dict[str, Any] = {
            "source": str(path),
            "counts": graph_counts(self._graph),
            "bounds": {
                "min": bounds.min.as_list(),
                "max": bounds.max.as_list(),
                "size": bounds.size.as_list(),
            },
            "parts": self._connected_parts(),
            "components": self._describe_components(),
            "hidden": [str(v.id) for v in self._graph.vertices.values() if not v.visible],
            "unsatisfied": [str(v) for v in unsatisfied],
            "skipped": report.skipped,
        }
        if report.circuit is not None:
            data["circuit"] = circuit_summary(report.circuit)
        return ServiceResult(ok=True, op="inspect", data=data, warnings=report.warnings)

    def _connected_parts(self) -> int:
        g = self._graph.to_networkx()
        if g.number_of_nodes() == 0:
            return 0
        return nx.number_weakly_connected_components(g)

    def _describe_components(self) -> list[dict[str, Any]]:
        return [
            {
                "id": str(component.id),
                "kind": str(component.kind),
                "label": component.label,
                "state": component.state,
            }
            for component in self._graph.components.values()
        ]

    # ------------------------------------------------------------------
    # play
    # ------------------------------------------------------------------

    @traced
    def play(
        self,
        moves: list[str],
        *,
        path: Path | None = None,
        qbf: str | None = None,
        force: bool = False,
        strict: bool = False,
    ) -> ServiceResult:
        """Load a circuit and apply edge reversals in order.

        Without *force* each move goes through ``try_reverse_edge`` and a
        move that leaves an endpoint unsatisfied is reverted. With *force*
        every move is applied and the graph re-evaluated.
        """
        try:
            with trace_span("load"):
                report = self._load_source(path, qbf, strict=strict)
            with trace_span("moves") as span:
                applied = [self._move(edge_id, force=force) for edge_id in moves]
                if span:
                    span.annotate("moves", len(applied))
            unsatisfied = self._graph.unsatisfied()
        except (NclError, OSError) as exc:
            return self._failure("play", exc, source=path or qbf)

        data: dict[str, Any] = {
            "moves": applied,
            "rejected": sum(1 for m in applied if not m["kept"]),
            "latches": {
                str(c.id): c.latch
                for c in self._graph.components.values()
                if isinstance(c, Universal)
            },
            "unsatisfied": [str(v) for v in unsatisfied],
        }
        if report.circuit is not None:
            data["circuit"] = circuit_summary(report.circuit)
        return ServiceResult(ok=True, op="play", data=data, warnings=report.warnings)

    def _load_source(self, path: Path | None, qbf: str | None, *, strict: bool) -> LoadReport:
        if (path is None) == (qbf is None):
            msg = "Provide exactly one of a description file or a QBF"
            raise FormatError(msg)
        if path is not None:
            return load_graph_file(self._graph, path, strict=strict)
        return load_graph(self._graph, qbf, strict=strict)

    def _move(self, edge_id: str, *, force: bool) -> MoveRecord:
        if force:
            edge = self._graph.reverse_edge(edge_id)
            self._graph.evaluate()
            kept = True
        else:
            kept = self._graph.try_reverse_edge(edge_id)
            edge = self._graph.get_edge(edge_id)
        return {
            "edge": str(edge.id),
            "kept": kept,
            "from": str(edge.from_id),
            "to": str(edge.to_id),
        }
