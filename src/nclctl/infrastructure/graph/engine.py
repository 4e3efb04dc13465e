"""Graph: owning registry of vertices, edges, gadgets and labels.

One arena per entity type, keyed by :class:`ElementId`. Edges store the
keys of their endpoints and gadgets store the keys of their ports, so
removal with cascade only touches the arenas.

INVARIANT: entities are only created through the ``add_*`` factories.
INVARIANT: no edge ever references a vertex missing from the arena.

Change notification: every outermost mutating call that succeeds sets
``dirty``, bumps ``version`` and invokes the ``on_change`` callback once.
Mutations nested inside another call (ports built by ``add_component``,
edges removed by a cascade) are folded into the outer notification.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, TypeAlias, TypeVar

import networkx as nx

from nclctl.domain.errors import DuplicateIdError, FormatError, NotFoundError, ReferentialError
from nclctl.domain.geometry import Bounds, Point
from nclctl.domain.ids import ElementId, IdLike
from nclctl.domain.types import Align, GateKind, Weight
from nclctl.infrastructure.graph.edge import Edge
from nclctl.infrastructure.graph.gadgets import GADGETS, Component
from nclctl.infrastructure.graph.label import Label
from nclctl.infrastructure.graph.vertex import Vertex

logger = logging.getLogger(__name__)

ChangeCallback: TypeAlias = Callable[["Graph"], None]
PointLike: TypeAlias = Point | Sequence[float] | None

_T = TypeVar("_T")


class Graph:
    """Constraint graph with the sole mutation API.

    Args:
        on_change: Called with the graph after each completed mutation.
    """

    def __init__(self, *, on_change: ChangeCallback | None = None) -> None:
        self._vertices: dict[ElementId, Vertex] = {}
        self._edges: dict[ElementId, Edge] = {}
        self._components: dict[ElementId, Component] = {}
        self._labels: dict[ElementId, Label] = {}
        self._on_change = on_change
        self._depth = 0
        self.dirty = False
        self.version = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def vertices(self) -> Mapping[ElementId, Vertex]:
        return MappingProxyType(self._vertices)

    @property
    def edges(self) -> Mapping[ElementId, Edge]:
        return MappingProxyType(self._edges)

    @property
    def components(self) -> Mapping[ElementId, Component]:
        return MappingProxyType(self._components)

    @property
    def labels(self) -> Mapping[ElementId, Label]:
        return MappingProxyType(self._labels)

    @property
    def bounds(self) -> Bounds:
        """Box around all vertex positions, derived on every access."""
        return Bounds.around(v.position for v in self._vertices.values())

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Group mutations; only the outermost block notifies, and only on success."""
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
        if self._depth == 0:
            self.dirty = True
            self.version += 1
            if self._on_change is not None:
                self._on_change(self)

    def consume_dirty(self) -> bool:
        """Return and reset the dirty flag (for polling consumers)."""
        dirty, self.dirty = self.dirty, False
        return dirty

    def clear(self) -> None:
        """Drop every entity."""
        with self.batch():
            self._vertices.clear()
            self._edges.clear()
            self._components.clear()
            self._labels.clear()

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _lookup(arena: dict[ElementId, _T], key: IdLike, kind: str) -> _T:
        element_id = ElementId.coerce(key)
        try:
            return arena[element_id]
        except KeyError:
            msg = f"Cannot find {kind} {element_id}"
            raise NotFoundError(msg) from None

    @staticmethod
    def _claim(arena: dict[ElementId, Any], key: IdLike, kind: str) -> ElementId:
        element_id = ElementId.coerce(key)
        if element_id in arena:
            msg = f"{kind.capitalize()} with id {element_id} already exists"
            raise DuplicateIdError(msg)
        return element_id

    # ------------------------------------------------------------------
    # Vertices
    # ------------------------------------------------------------------

    def has_vertex(self, vertex_id: IdLike) -> bool:
        return ElementId.coerce(vertex_id) in self._vertices

    def get_vertex(self, vertex_id: IdLike) -> Vertex:
        return self._lookup(self._vertices, vertex_id, "vertex")

    def add_vertex(
        self,
        vertex_id: IdLike,
        position: PointLike = None,
        visible: bool = True,
        *,
        muted: bool = False,
    ) -> Vertex:
        with self.batch():
            key = self._claim(self._vertices, vertex_id, "vertex")
            vertex = Vertex(self, key, Point.of(position), visible=bool(visible), muted=muted)
            self._vertices[key] = vertex
        return vertex

    def remove_vertex(self, vertex_id: IdLike) -> Vertex:
        """Remove a vertex and every edge incident to it.

        Raises:
            ReferentialError: the vertex is a gadget port.
        """
        vertex = self.get_vertex(vertex_id)
        if vertex.is_port:
            msg = f"Vertex {vertex.id} is a port of {vertex.component_id}; remove the component"
            raise ReferentialError(msg)
        with self.batch():
            self._discard_vertex(vertex)
        return vertex

    def _discard_vertex(self, vertex: Vertex) -> None:
        for edge_id in list(vertex.edge_ids):
            self.remove_edge(edge_id)
        del self._vertices[vertex.id]

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def has_edge(self, edge_id: IdLike) -> bool:
        return ElementId.coerce(edge_id) in self._edges

    def get_edge(self, edge_id: IdLike) -> Edge:
        return self._lookup(self._edges, edge_id, "edge")

    def add_edge(
        self,
        edge_id: IdLike,
        from_id: IdLike,
        to_id: IdLike,
        weight: int = Weight.SINGLE,
        *,
        muted: bool = False,
        label_visible: bool = False,
    ) -> Edge:
        """Connect two existing vertices.

        Raises:
            DuplicateIdError: *edge_id* is taken.
            ReferentialError: an endpoint does not exist.
            FormatError: *weight* is not 1 or 2.
        """
        with self.batch():
            key = self._claim(self._edges, edge_id, "edge")
            endpoints = []
            for end in (from_id, to_id):
                end_key = ElementId.coerce(end)
                if end_key not in self._vertices:
                    msg = f"Cannot connect edge {key}: vertex {end_key} does not exist"
                    raise ReferentialError(msg)
                endpoints.append(self._vertices[end_key])
            source, target = endpoints
            if isinstance(weight, bool) or not isinstance(weight, int) or weight not in (1, 2):
                msg = f"Edge {key} weight must be the integer 1 or 2, got {weight!r}"
                raise FormatError(msg)
            checked = Weight(weight)

            edge = Edge(
                self,
                key,
                source.id,
                target.id,
                int(checked),
                muted=muted,
                label_visible=label_visible,
            )
            self._edges[key] = edge
            source.edge_ids[key] = None
            target.edge_ids[key] = None
        return edge

    def remove_edge(self, edge_id: IdLike) -> Edge:
        edge = self.get_edge(edge_id)
        with self.batch():
            for end in (edge.from_id, edge.to_id):
                self._vertices[end].edge_ids.pop(edge.id, None)
            del self._edges[edge.id]
        return edge

    def reverse_edge(self, edge_id: IdLike) -> Edge:
        """Swap an edge's orientation in place. This is the only puzzle move."""
        edge = self.get_edge(edge_id)
        with self.batch():
            edge.reverse()
        return edge

    def try_reverse_edge(self, edge_id: IdLike) -> bool:
        """Reverse an edge, keeping the move only if both endpoints stay satisfied.

        A rejected move is undone before any gadget state is committed.
        Returns True when the move was kept.
        """
        edge = self.get_edge(edge_id)
        with self.batch():
            edge.reverse()
            if not edge.constraint_satisfied:
                edge.reverse()
                logger.debug("Rejected move on edge %s", edge.id)
                return False
            self.evaluate()
        return True

    def nearest_edge(self, point: PointLike, radius: float = 0.5) -> Edge | None:
        """Closest non-circular edge whose center lies within *radius* of *point*."""
        target = Point.of(point)
        best: Edge | None = None
        best_distance = float("inf")
        for edge in self._edges.values():
            if edge.circular:
                continue
            distance = edge.center.distance(target)
            if distance <= radius and distance < best_distance:
                best, best_distance = edge, distance
        return best

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def has_component(self, component_id: IdLike) -> bool:
        return ElementId.coerce(component_id) in self._components

    def get_component(self, component_id: IdLike) -> Component:
        return self._lookup(self._components, component_id, "component")

    def add_component(
        self,
        component_id: IdLike,
        position: PointLike,
        kind: GateKind | str,
        *,
        muted: bool = False,
        **config: Any,
    ) -> Component:
        """Create a gadget and its port vertices (``<component>.<port>``).

        Configuration is validated before any port exists; ports created
        before a failure are rolled back.

        Raises:
            DuplicateIdError: the component id or a port id is taken.
            FormatError: unknown kind or invalid configuration.
        """
        with self.batch():
            key = self._claim(self._components, component_id, "component")
            try:
                gadget_cls = GADGETS[GateKind(kind)]
            except (KeyError, ValueError) as exc:
                msg = f"Unknown component kind {kind!r}"
                raise FormatError(msg) from exc

            component = gadget_cls(self, key, Point.of(position), muted=muted, **config)

            created: list[Vertex] = []
            try:
                for name, spec in component.layout.items():
                    port = self.add_vertex(
                        key.child(name), component.position + spec.offset, muted=muted
                    )
                    port.bind_port(component.kind, key, name)
                    created.append(port)
            except DuplicateIdError:
                for port in created:
                    self._discard_vertex(port)
                raise

            component.ports = {port.port: port.id for port in created if port.port}
            self._components[key] = component
        return component

    def remove_component(self, component_id: IdLike) -> Component:
        """Remove a gadget, its ports, and every edge attached to them."""
        component = self.get_component(component_id)
        with self.batch():
            for port_id in component.ports.values():
                self._discard_vertex(self._vertices[port_id])
            del self._components[component.id]
        return component

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def has_label(self, label_id: IdLike) -> bool:
        return ElementId.coerce(label_id) in self._labels

    def get_label(self, label_id: IdLike) -> Label:
        return self._lookup(self._labels, label_id, "label")

    def add_label(
        self,
        label_id: IdLike,
        position: PointLike = None,
        text: str = "",
        halign: Align | str = Align.CENTER,
        valign: Align | str = Align.CENTER,
    ) -> Label:
        with self.batch():
            key = self._claim(self._labels, label_id, "label")
            try:
                h, v = Align(halign), Align(valign)
            except ValueError as exc:
                msg = f"Invalid alignment for label {key}: {halign!r}, {valign!r}"
                raise FormatError(msg) from exc
            label = Label(key, Point.of(position), str(text), h, v)
            self._labels[key] = label
        return label

    def remove_label(self, label_id: IdLike) -> Label:
        label = self.get_label(label_id)
        with self.batch():
            del self._labels[label.id]
        return label

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, order: Iterable[IdLike] | None = None) -> dict[ElementId, bool]:
        """Run one validation pass and commit gadget state.

        1. every gadget clears and computes its requested transitions;
        2. the vertices in *order* (default: all, in insertion order) are
           queried against committed state;
        3. every gadget commits.

        Returns the satisfaction of each visited vertex, as observed
        before the commit.
        """
        components = list(self._components.values())
        for component in components:
            component.begin_pass()
        for component in components:
            component.request_transitions()

        keys = self._vertices.keys() if order is None else [ElementId.coerce(k) for k in order]
        satisfied = {key: self.get_vertex(key).constraint_satisfied for key in keys}

        for component in components:
            component.commit()
        return satisfied

    def unsatisfied(self) -> list[ElementId]:
        """Run a validation pass and list the vertices that failed it."""
        return [key for key, ok in self.evaluate().items() if not ok]

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_networkx(self) -> nx.MultiDiGraph:
        """Snapshot the current topology as a NetworkX multigraph.

        Nodes and edges are keyed by dotted id text.
        """
        g = nx.MultiDiGraph()
        for vertex in self._vertices.values():
            g.add_node(
                str(vertex.id),
                position=vertex.position.as_list(),
                visible=vertex.visible,
                gate=str(vertex.gate),
                component=str(vertex.component_id) if vertex.component_id else None,
            )
        for edge in self._edges.values():
            g.add_edge(str(edge.from_id), str(edge.to_id), key=str(edge.id), weight=edge.weight)
        return g

    def __repr__(self) -> str:
        return (
            f"Graph(vertices={len(self._vertices)}, edges={len(self._edges)}, "
            f"components={len(self._components)}, labels={len(self._labels)})"
        )
