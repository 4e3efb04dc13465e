"""Constraint-graph engine: arenas of vertices, edges, gadgets and labels."""

from nclctl.infrastructure.graph.edge import Edge
from nclctl.infrastructure.graph.engine import Graph
from nclctl.infrastructure.graph.gadgets import (
    GADGETS,
    CNFEvaluator,
    Component,
    Converter,
    Existential,
    Universal,
)
from nclctl.infrastructure.graph.label import Label
from nclctl.infrastructure.graph.vertex import Vertex

__all__ = [
    "CNFEvaluator",
    "Component",
    "Converter",
    "Edge",
    "Existential",
    "GADGETS",
    "Graph",
    "Label",
    "Universal",
    "Vertex",
]
