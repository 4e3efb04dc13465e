"""Vertex: a node whose incident edges live in the owning Graph's arena."""

from __future__ import annotations

from typing import TYPE_CHECKING

from nclctl.domain.geometry import Point, mean
from nclctl.domain.types import MIN_INFLOW, Direction, GateKind, Weight

if TYPE_CHECKING:
    from nclctl.domain.ids import ElementId
    from nclctl.infrastructure.graph.edge import Edge
    from nclctl.infrastructure.graph.engine import Graph


class Vertex:
    """A graph node.

    Holds only keys of its incident edges; the edges themselves are
    resolved through the owning graph. Vertices are created exclusively by
    :meth:`Graph.add_vertex` (directly, or for gadget ports by
    :meth:`Graph.add_component`).

    Attributes:
        id: Structured id.
        position: Cosmetic coordinate.
        visible: Hidden vertices are always satisfied under the default rule.
        muted: Cosmetic flag.
        gate: Predicate kind; ``PLAIN`` unless the vertex is a gadget port.
        component_id: Owning gadget for ports, else None.
        port: Port name within the owning gadget, else None.
    """

    def __init__(
        self,
        graph: Graph,
        vertex_id: ElementId,
        position: Point,
        *,
        visible: bool = True,
        muted: bool = False,
    ) -> None:
        self._graph = graph
        self.id = vertex_id
        self.position = position
        self.visible = visible
        self.muted = muted
        self.edge_ids: dict[ElementId, None] = {}
        self.gate = GateKind.PLAIN
        self.component_id: ElementId | None = None
        self.port: str | None = None

    # --- topology ---

    @property
    def edges(self) -> dict[ElementId, Edge]:
        """Incident edges keyed by edge id, in insertion order."""
        return {eid: self._graph.get_edge(eid) for eid in self.edge_ids}

    def relative_edges(self, direction: Direction) -> list[Edge]:
        return [e for e in self.edges.values() if e.relative_direction(self) is direction]

    @property
    def incoming_edges(self) -> list[Edge]:
        return self.relative_edges(Direction.INCOMING)

    @property
    def outgoing_edges(self) -> list[Edge]:
        return self.relative_edges(Direction.OUTGOING)

    @property
    def inflow(self) -> int:
        return sum(e.weight for e in self.incoming_edges)

    @property
    def outflow(self) -> int:
        return sum(e.weight for e in self.outgoing_edges)

    @property
    def receiving(self) -> bool:
        """At least one incident edge points into this vertex."""
        return self.inflow > 0

    @property
    def driving(self) -> bool:
        """At least one incident edge points away from this vertex."""
        return self.outflow > 0

    def port_connected(self, n_single: int, n_double: int) -> bool:
        """True iff exactly *n_single* weight-1 and *n_double* weight-2 edges are incident."""
        weights = [e.weight for e in self.edges.values()]
        return weights.count(Weight.SINGLE) == n_single and weights.count(Weight.DOUBLE) == n_double

    # --- constraint ---

    @property
    def constraint_satisfied(self) -> bool:
        if self.gate is GateKind.PLAIN:
            return not self.visible or self.inflow >= MIN_INFLOW
        assert self.component_id is not None and self.port is not None
        return self._graph.get_component(self.component_id).port_satisfied(self.port)

    def bind_port(self, gate: GateKind, component_id: ElementId, port: str) -> None:
        """Attach a gadget predicate. Called by the graph while building a component."""
        self.gate = gate
        self.component_id = component_id
        self.port = port

    @property
    def is_port(self) -> bool:
        return self.component_id is not None

    # --- layout hint ---

    @property
    def preferred_edge_direction(self) -> Point:
        """Negated mean of unit vectors toward neighbours (self-loops ignored)."""
        directions = [
            (e.opposite(self).position - self.position).normalized()
            for e in self.edges.values()
            if not e.circular
        ]
        if not directions:
            return Point(-1.0, 0.0)
        return -mean(directions)

    def __repr__(self) -> str:
        return f"Vertex({self.id}@{self.position.x:g},{self.position.y:g})"
