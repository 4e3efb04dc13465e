"""Edge: an oriented, weighted connection between two vertices.

INVARIANT: weight is fixed at creation; only orientation changes, and only
through :meth:`Edge.reverse` (reached via ``Graph.reverse_edge``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nclctl.domain.errors import ReferentialError
from nclctl.domain.ids import ElementId
from nclctl.domain.types import Direction

if TYPE_CHECKING:
    from nclctl.domain.geometry import Point
    from nclctl.infrastructure.graph.engine import Graph
    from nclctl.infrastructure.graph.vertex import Vertex


class Edge:
    """A directed edge stored by endpoint keys.

    Attributes:
        id: Structured id.
        from_id: Key of the current source vertex.
        to_id: Key of the current sink vertex.
        muted: Cosmetic flag.
        label_visible: Whether renderers should draw the edge id.
    """

    def __init__(
        self,
        graph: Graph,
        edge_id: ElementId,
        from_id: ElementId,
        to_id: ElementId,
        weight: int,
        *,
        muted: bool = False,
        label_visible: bool = False,
    ) -> None:
        self._graph = graph
        self.id = edge_id
        self.from_id = from_id
        self.to_id = to_id
        self._weight = weight
        self.muted = muted
        self.label_visible = label_visible

    @property
    def weight(self) -> int:
        return self._weight

    @property
    def source(self) -> Vertex:
        return self._graph.get_vertex(self.from_id)

    @property
    def target(self) -> Vertex:
        return self._graph.get_vertex(self.to_id)

    @property
    def circular(self) -> bool:
        return self.from_id == self.to_id

    @property
    def constraint_satisfied(self) -> bool:
        """Both endpoints satisfied (highlighting only)."""
        return self.source.constraint_satisfied and self.target.constraint_satisfied

    def relative_direction(self, vertex: Vertex | ElementId) -> Direction:
        """Classify *vertex* as this edge's sink (incoming) or source (outgoing).

        A self-loop is incoming for its only endpoint.

        Raises:
            ReferentialError: *vertex* is not an endpoint.
        """
        key = vertex if isinstance(vertex, ElementId) else vertex.id
        if key == self.to_id:
            return Direction.INCOMING
        if key == self.from_id:
            return Direction.OUTGOING
        msg = f"Vertex {key} is not an endpoint of edge {self.id}"
        raise ReferentialError(msg)

    def opposite(self, vertex: Vertex | ElementId) -> Vertex:
        if self.relative_direction(vertex) is Direction.INCOMING:
            return self.source
        return self.target

    def reverse(self) -> None:
        self.from_id, self.to_id = self.to_id, self.from_id

    @property
    def center(self) -> Point:
        return (self.source.position + self.target.position) / 2

    @property
    def delta(self) -> Point:
        return self.target.position - self.source.position

    def __repr__(self) -> str:
        return f"Edge({self.id}: {self.from_id} -> {self.to_id}, w={self.weight})"
