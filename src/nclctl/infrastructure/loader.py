"""Graph description loader.

A description is a YAML document (or an already-parsed mapping)::

    position: [0, 0]
    components:
      q: [2, 0, universal, x]
      f: [2, 5, cnf, "(x || !x)"]
    vertices:
      a: [0, 0]
      b: [1, 1, hidden]
    edges:
      ab: [a, b, 2, label]
      loop: [a]            # self-loop
    labels:
      title: [0, -1, "Universal gadget", left, top]
    groups:
      left:
        position: [10, 0]
        vertices: {...}

Entries are ``[x, y, ...args]`` lists; trailing flags are ``hidden``,
``muted``, ``label`` and ``flip``. Group members are namespaced by the
group name and offset by the group position. A document that is a plain
string is compiled as a QBF.

Per-entity failures, including a malformed group, are recoverable: the
entity is skipped and a warning recorded, unless ``strict`` is set. A
malformed document or section is always a ``FormatError``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from nclctl.domain.errors import FormatError, NclError
from nclctl.domain.geometry import Point
from nclctl.domain.ids import ElementId
from nclctl.domain.types import GateKind
from nclctl.infrastructure.compiler import QbfCircuit, compile_qbf
from nclctl.infrastructure.graph.engine import Graph

logger = logging.getLogger(__name__)

FLAG_HIDDEN = "hidden"
FLAG_MUTED = "muted"
FLAG_LABEL = "label"
FLAG_FLIP = "flip"
FLAGS = frozenset({FLAG_HIDDEN, FLAG_MUTED, FLAG_LABEL, FLAG_FLIP})

SECTIONS = ("position", "components", "vertices", "edges", "labels", "groups")

_QBF_PREFIX = re.compile(r"^\s*(forall|exists)\s")

# Option name carried by the first positional argument, per gadget kind.
_COMPONENT_ARG: dict[GateKind, str] = {
    GateKind.EXISTENTIAL: "variable",
    GateKind.UNIVERSAL: "variable",
    GateKind.CNF: "formula",
}


@dataclass
class LoadReport:
    """Outcome of a load: what was created and what was skipped."""

    components: int = 0
    vertices: int = 0
    edges: int = 0
    labels: int = 0
    warnings: list[str] = field(default_factory=list)
    circuit: QbfCircuit | None = None

    @property
    def skipped(self) -> int:
        return len(self.warnings)


@dataclass(frozen=True)
class _Entry:
    """A raw ``[x, y, ...]`` entry split into values and flags."""

    values: list[Any]
    flags: frozenset[str]

    @classmethod
    def split(cls, raw: Any) -> _Entry:
        if raw is None:
            return cls([], frozenset())
        if isinstance(raw, (str, int, float)):
            raw = [raw]
        if not isinstance(raw, list):
            msg = f"Expected a list entry, got {type(raw).__name__}"
            raise FormatError(msg)
        values = [item for item in raw if not (isinstance(item, str) and item in FLAGS)]
        flags = frozenset(item for item in raw if isinstance(item, str) and item in FLAGS)
        return cls(values, flags)

    def position(self, offset: Point) -> tuple[Point, list[Any]]:
        """Consume leading numeric coordinates; return position and the rest."""
        coords: list[float] = []
        rest = list(self.values)
        while rest and len(coords) < 2 and _is_number(rest[0]):
            coords.append(float(rest.pop(0)))
        return offset + Point.of(coords), rest


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _where(prefix: ElementId | None) -> str:
    return f"group {prefix}" if prefix is not None else "document"


def _check_shape(doc: Any, prefix: ElementId | None) -> None:
    """Reject a document or group that is not a mapping of known sections."""
    if not isinstance(doc, Mapping):
        msg = f"The {_where(prefix)} must be a mapping, got {type(doc).__name__}"
        raise FormatError(msg)
    unknown = sorted(set(map(str, doc)) - set(SECTIONS))
    if unknown:
        msg = f"Unknown section(s) in {_where(prefix)}: {', '.join(unknown)}"
        raise FormatError(msg)
    _origin(doc, prefix)
    for name in SECTIONS[1:]:
        _section(doc, name, prefix)


def _origin(doc: Mapping[str, Any], prefix: ElementId | None) -> Point:
    raw = doc.get("position")
    if raw is None:
        return Point()
    if not isinstance(raw, list) or len(raw) > 2 or not all(_is_number(v) for v in raw):
        msg = f"Section 'position' of the {_where(prefix)} must be [x, y], got {raw!r}"
        raise FormatError(msg)
    return Point.of(raw)


def _section(doc: Mapping[str, Any], name: str, prefix: ElementId | None) -> Mapping[Any, Any]:
    raw = doc.get(name)
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        msg = (
            f"Section {name!r} of the {_where(prefix)} must be a mapping of id to entry, "
            f"got {type(raw).__name__}"
        )
        raise FormatError(msg)
    return raw


def parse_document(text: str) -> Any:
    """Parse YAML text with the safe loader."""
    try:
        return YAML(typ="safe").load(text)
    except YAMLError as exc:
        msg = f"Invalid graph description: {exc}"
        raise FormatError(msg) from exc


class _Loader:
    def __init__(self, graph: Graph, *, strict: bool) -> None:
        self.graph = graph
        self.strict = strict
        self.report = LoadReport()
        self._pending_edges: list[tuple[ElementId | None, str, Any]] = []

    # --- failure policy ---

    def _fail(self, kind: str, entity_id: Any, raw: Any, exc: Exception) -> None:
        message = f"Could not create {kind} {entity_id!s}: {raw!r}: {exc}"
        if self.strict:
            raise FormatError(message) from exc
        logger.warning("Skipping %s %s: %s", kind, entity_id, exc)
        self.report.warnings.append(message)

    # --- document walk ---

    def load(self, doc: Mapping[str, Any]) -> None:
        self._walk(doc, prefix=None, offset=Point())
        for prefix, edge_id, raw in self._pending_edges:
            self._edge(prefix, edge_id, raw)

    def _walk(self, doc: Mapping[str, Any], *, prefix: ElementId | None, offset: Point) -> None:
        origin = offset + _origin(doc, prefix)
        sections = {name: _section(doc, name, prefix) for name in SECTIONS[1:]}

        for component_id, raw in sections["components"].items():
            self._component(prefix, origin, component_id, raw)
        for vertex_id, raw in sections["vertices"].items():
            self._vertex(prefix, origin, vertex_id, raw)
        for label_id, raw in sections["labels"].items():
            self._label(prefix, origin, label_id, raw)
        for edge_id, raw in sections["edges"].items():
            self._pending_edges.append((prefix, edge_id, raw))

        for name, group in sections["groups"].items():
            try:
                group_prefix = ElementId.parse(str(name)).within(prefix)
                _check_shape(group, group_prefix)
            except (NclError, ValueError) as exc:
                self._fail("group", name, group, exc)
                continue
            self._walk(group, prefix=group_prefix, offset=origin)

    # --- entities ---

    def _component(self, prefix: ElementId | None, origin: Point, cid: Any, raw: Any) -> None:
        try:
            entry = _Entry.split(raw)
            position, rest = entry.position(origin)
            if not rest:
                msg = "missing component kind"
                raise FormatError(msg)
            kind = GateKind(str(rest.pop(0)))
            config: dict[str, Any] = {}
            if rest:
                option = _COMPONENT_ARG.get(kind)
                if option is None or len(rest) > 1:
                    msg = f"unexpected arguments {rest!r}"
                    raise FormatError(msg)
                config[option] = str(rest[0])
            key = ElementId.parse(str(cid)).within(prefix)
            self.graph.add_component(
                key, position, kind, muted=FLAG_MUTED in entry.flags, **config
            )
            self.report.components += 1
        except (NclError, ValueError, TypeError) as exc:
            self._fail("component", cid, raw, exc)

    def _vertex(self, prefix: ElementId | None, origin: Point, vid: Any, raw: Any) -> None:
        try:
            entry = _Entry.split(raw)
            position, rest = entry.position(origin)
            if rest:
                msg = f"unexpected arguments {rest!r}"
                raise FormatError(msg)
            self.graph.add_vertex(
                ElementId.parse(str(vid)).within(prefix),
                position,
                FLAG_HIDDEN not in entry.flags,
                muted=FLAG_MUTED in entry.flags,
            )
            self.report.vertices += 1
        except (NclError, ValueError, TypeError) as exc:
            self._fail("vertex", vid, raw, exc)

    def _label(self, prefix: ElementId | None, origin: Point, lid: Any, raw: Any) -> None:
        try:
            entry = _Entry.split(raw)
            position, rest = entry.position(origin)
            text = str(rest.pop(0)) if rest else ""
            align = [str(a) for a in rest[:2]]
            self.graph.add_label(ElementId.parse(str(lid)).within(prefix), position, text, *align)
            self.report.labels += 1
        except (NclError, ValueError, TypeError) as exc:
            self._fail("label", lid, raw, exc)

    def _resolve(self, prefix: ElementId | None, ref: Any) -> ElementId:
        """Resolve an endpoint: the current group first, then globally."""
        key = ElementId.parse(str(ref))
        local = key.within(prefix)
        if self.graph.has_vertex(local) or not self.graph.has_vertex(key):
            return local
        return key

    def _edge(self, prefix: ElementId | None, eid: Any, raw: Any) -> None:
        try:
            entry = _Entry.split(raw)
            ends = [v for v in entry.values if isinstance(v, str)]
            weights = [v for v in entry.values if _is_number(v)]
            if not 1 <= len(ends) <= 2 or len(weights) > 1:
                msg = "expected [from, to?, weight?, flags...]"
                raise FormatError(msg)
            source = self._resolve(prefix, ends[0])
            target = self._resolve(prefix, ends[-1])
            if FLAG_FLIP in entry.flags:
                source, target = target, source
            self.graph.add_edge(
                ElementId.parse(str(eid)).within(prefix),
                source,
                target,
                weights[0] if weights else 1,
                muted=FLAG_MUTED in entry.flags,
                label_visible=FLAG_LABEL in entry.flags,
            )
            self.report.edges += 1
        except (NclError, ValueError, TypeError) as exc:
            self._fail("edge", eid, raw, exc)


def load_graph(graph: Graph, data: Any, *, strict: bool = False) -> LoadReport:
    """Replace the contents of *graph* with a description.

    Args:
        graph: Target graph; cleared before loading.
        data: YAML text, a parsed mapping, or (as text or parsed value) a
            QBF string.
        strict: Raise on the first bad entity instead of skipping it.

    Raises:
        FormatError: the document is not a mapping or QBF string, has an
            unknown or malformed section, or (strict only) contains a bad
            entity or group. The graph is left empty.
    """
    if isinstance(data, str) and _QBF_PREFIX.match(data):
        doc: Any = data
    elif isinstance(data, str):
        doc = parse_document(data)
    else:
        doc = data
    graph.clear()

    if isinstance(doc, str):
        circuit = compile_qbf(doc, graph)
        return LoadReport(
            components=len(graph.components),
            vertices=len(graph.vertices),
            edges=len(graph.edges),
            labels=len(graph.labels),
            circuit=circuit,
        )
    _check_shape(doc, None)

    loader = _Loader(graph, strict=strict)
    try:
        with graph.batch():
            loader.load(doc)
    except Exception:
        graph.clear()
        raise
    return loader.report


def load_graph_file(graph: Graph, path: Path, *, strict: bool = False) -> LoadReport:
    """Read a description file and load it into *graph*.

    Raises:
        OSError: the file cannot be read.
        FormatError: the file is not UTF-8 text, or :func:`load_graph` rejects it.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Graph description {path} is not valid UTF-8: {exc}"
        raise FormatError(msg) from exc
    return load_graph(graph, text, strict=strict)
