"""Gadget components: fixed sub-graphs with named ports.

A gadget's ports are ordinary graph vertices whose predicate is selected by
their ``gate`` tag. Each gate kind maps to exactly one class in
:data:`GADGETS`; a port is satisfied iff it has the wiring arity its
gadget declares and the gadget's ``validate()`` holds.

Stateful gadgets (``Universal``) follow a two-phase discipline during a
validation pass: ``begin_pass`` clears requests, ``request_transitions``
records requested state changes computed from committed state only, and
``commit`` applies them once the whole pass is done. Validators never read
uncommitted state, so the visiting order within a pass cannot change the
outcome.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from nclctl.domain.cnf import CNFFormula, parse_cnf
from nclctl.domain.errors import FormatError, NotFoundError
from nclctl.domain.geometry import Point
from nclctl.domain.types import GateKind

if TYPE_CHECKING:
    from nclctl.domain.ids import ElementId
    from nclctl.infrastructure.graph.engine import Graph
    from nclctl.infrastructure.graph.vertex import Vertex

_VARIABLE_PATTERN = re.compile(r"^[a-zA-Z]$")


@dataclass(frozen=True)
class PortSpec:
    """Placement and exact wiring arity of one gadget port."""

    offset: Point
    singles: int = 0
    doubles: int = 0


class Component:
    """Base class for all gadgets.

    Instances are created by :meth:`Graph.add_component`, which validates
    the configuration (by constructing the component) before creating any
    port vertex.
    """

    kind: ClassVar[GateKind]

    def __init__(
        self,
        graph: Graph,
        component_id: ElementId,
        position: Point,
        *,
        muted: bool = False,
        **config: Any,
    ) -> None:
        self._graph = graph
        self.id = component_id
        self.position = position
        self.muted = muted
        self.ports: dict[str, ElementId] = {}
        self.size = Point(1.0, 1.0)
        self.label = ""
        self.configure(**config)
        self.layout = self.port_layout()

    def configure(self, **config: Any) -> None:
        """Consume gadget-specific options. The base gadget takes none."""
        self._reject_options(config)

    def _reject_options(self, extra: dict[str, Any]) -> None:
        if extra:
            msg = f"Unknown {type(self).__name__} option(s): {', '.join(sorted(extra))}"
            raise FormatError(msg)

    def port_layout(self) -> dict[str, PortSpec]:
        raise NotImplementedError

    def port(self, name: str) -> Vertex:
        try:
            vertex_id = self.ports[name]
        except KeyError:
            msg = f"Component {self.id} has no port {name!r}"
            raise NotFoundError(msg) from None
        return self._graph.get_vertex(vertex_id)

    def port_satisfied(self, name: str) -> bool:
        spec = self.layout[name]
        vertex = self.port(name)
        return vertex.port_connected(spec.singles, spec.doubles) and self.validate()

    @property
    def constraint_satisfied(self) -> bool:
        return all(self.port_satisfied(name) for name in self.ports)

    def validate(self) -> bool:
        """Gadget-level rule shared by all ports."""
        return True

    # --- two-phase state discipline (no-ops for stateless gadgets) ---

    def begin_pass(self) -> None:
        pass

    def request_transitions(self) -> None:
        pass

    def commit(self) -> None:
        pass

    @property
    def state(self) -> dict[str, Any]:
        """Reportable gadget state."""
        return {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"


class Converter(Component):
    """Single merged port joining a weight-1 and a weight-2 wire; needs inflow ≥ 1."""

    kind = GateKind.CONVERTER

    def port_layout(self) -> dict[str, PortSpec]:
        return {"port": PortSpec(Point(0.0, 0.0), singles=1, doubles=1)}

    def validate(self) -> bool:
        return self.port("port").inflow >= 1


class _Quantifier(Component):
    """Shared port layout of the quantifier gadgets."""

    symbol: ClassVar[str] = "?"

    def configure(self, *, variable: str = "X", **extra: Any) -> None:
        self._reject_options(extra)
        variable = str(variable)
        if _VARIABLE_PATTERN.match(variable) is None:
            msg = f"Invalid quantifier variable {variable!r}: expected a single letter"
            raise FormatError(msg)
        self.variable = variable
        self.size = Point(3.0, 3.0)
        self.label = f"{self.symbol}{variable}"

    def port_layout(self) -> dict[str, PortSpec]:
        return {
            "tryin": PortSpec(Point(0.0, 1.0), doubles=1),
            "tryout": PortSpec(Point(3.0, 1.0), doubles=1),
            "satin": PortSpec(Point(3.0, 2.0), doubles=1),
            "satout": PortSpec(Point(0.0, 2.0), doubles=1),
            "out": PortSpec(Point(1.0, 0.0), singles=1),
            "inv": PortSpec(Point(2.0, 0.0), singles=1),
        }

    @property
    def state(self) -> dict[str, Any]:
        return {"variable": self.variable}


class Existential(_Quantifier):
    """Stateless quantifier: the player may choose out, inv, or neither."""

    kind = GateKind.EXISTENTIAL
    symbol = "∃"

    def validate(self) -> bool:
        tryin, tryout = self.port("tryin"), self.port("tryout")
        satin, satout = self.port("satin"), self.port("satout")
        out, inv = self.port("out"), self.port("inv")

        if tryout.driving and not tryin.receiving:
            return False
        if tryout.driving and out.driving and inv.driving:
            return False
        if satout.driving and not satin.receiving:
            return False
        return True


class Universal(_Quantifier):
    """Quantifier with a latch remembering that the ``inv`` branch was satisfied.

    Attributes:
        latch: Committed latch bit; the only value validators read.
    """

    kind = GateKind.UNIVERSAL
    symbol = "∀"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.latch = False
        self._set_requested = False
        self._clear_requested = False

    def begin_pass(self) -> None:
        self._set_requested = False
        self._clear_requested = False

    def request_transitions(self) -> None:
        satin, tryin, inv = self.port("satin"), self.port("tryin"), self.port("inv")
        if satin.receiving and inv.driving and self._satin_feeder_satisfied(satin):
            self._set_requested = True
        if not tryin.receiving:
            self._clear_requested = True

    @staticmethod
    def _satin_feeder_satisfied(satin: Vertex) -> bool:
        incoming = satin.incoming_edges
        return bool(incoming) and incoming[0].source.constraint_satisfied

    @property
    def latch_requested(self) -> bool:
        """Latch value the next commit will store. CLEAR wins over SET."""
        if self._clear_requested:
            return False
        if self._set_requested:
            return True
        return self.latch

    def commit(self) -> None:
        self.latch = self.latch_requested
        self.begin_pass()

    def validate(self) -> bool:
        tryin, tryout = self.port("tryin"), self.port("tryout")
        satin, satout = self.port("satin"), self.port("satout")
        out, inv = self.port("out"), self.port("inv")

        if tryout.driving and not tryin.receiving:
            return False
        if tryout.driving and out.driving == inv.driving:
            return False
        if satout.driving and not (satin.receiving and self.latch and out.driving):
            return False
        return True

    @property
    def state(self) -> dict[str, Any]:
        return {**super().state, "latch": self.latch}


class CNFEvaluator(Component):
    """Formula gadget: ``satisfied`` may drive only while the formula holds.

    A literal is true iff its port is receiving from its wire.
    """

    kind = GateKind.CNF

    def configure(self, *, formula: str | CNFFormula = "(X)", **extra: Any) -> None:
        self._reject_options(extra)
        self.formula = formula if isinstance(formula, CNFFormula) else parse_cnf(formula)
        count = len(self.formula.variables)
        self.size = Point(count * 4 + 3.0, 2.0)
        self.label = self.formula.pretty

    def port_layout(self) -> dict[str, PortSpec]:
        layout: dict[str, PortSpec] = {}
        for i, variable in enumerate(self.formula.variables):
            layout[variable] = PortSpec(Point(i * 4 + 1.0, 2.0), singles=1)
            layout[f"!{variable}"] = PortSpec(Point(i * 4 + 2.0, 2.0), singles=1)
        count = len(self.formula.variables)
        layout["satisfied"] = PortSpec(Point(count * 4 + 2.0, 2.0), doubles=1)
        return layout

    def literal_true(self, port: str) -> bool:
        return self.port(port).receiving

    def formula_satisfied(self) -> bool:
        return all(
            any(self.literal_true(lit.port) for lit in clause) for clause in self.formula.clauses
        )

    def validate(self) -> bool:
        return not self.port("satisfied").driving or self.formula_satisfied()

    @property
    def state(self) -> dict[str, Any]:
        return {"formula": self.formula.text, "formula_satisfied": self.formula_satisfied()}


GADGETS: dict[GateKind, type[Component]] = {
    GateKind.CONVERTER: Converter,
    GateKind.EXISTENTIAL: Existential,
    GateKind.UNIVERSAL: Universal,
    GateKind.CNF: CNFEvaluator,
}
