"""Classification enums shared across the engine.

``GateKind`` is the closed set of vertex predicates: every vertex is either
plain (default inflow rule) or the port of exactly one gadget kind.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class GateKind(StrEnum):
    """Predicate attached to a vertex."""

    PLAIN = "plain"
    CONVERTER = "converter"
    EXISTENTIAL = "existential"
    UNIVERSAL = "universal"
    CNF = "cnf"


class Direction(StrEnum):
    """Orientation of an edge relative to one of its endpoints."""

    INCOMING = "incoming"
    OUTGOING = "outgoing"


class Weight(IntEnum):
    """Edge capacity, fixed at creation."""

    SINGLE = 1
    DOUBLE = 2


class Align(StrEnum):
    """Label anchor alignment."""

    CENTER = "center"
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class QuantifierKind(StrEnum):
    """Quantifiers accepted in a QBF prefix."""

    FORALL = "forall"
    EXISTS = "exists"


# Minimum inflow for a visible plain vertex.
MIN_INFLOW = 2
