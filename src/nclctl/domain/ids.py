"""Structured element identifiers.

An id is a path of segments: zero or more group names, then the element
name, then (for gadget ports) the port name. Equality is structural.
The dotted text form (``group.component.port``) exists only at the
external-format boundary: ``ElementId.parse`` reads it, ``str()`` writes it.

INVARIANT: segments are non-empty and never contain the separator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from nclctl.domain.errors import FormatError

SEPARATOR = "."


@dataclass(frozen=True, order=True)
class ElementId:
    """Hierarchical identifier for vertices, edges, components and labels."""

    parts: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.parts:
            msg = "Element id must have at least one segment"
            raise FormatError(msg)
        for part in self.parts:
            if not isinstance(part, str) or not part or SEPARATOR in part:
                msg = f"Invalid id segment {part!r} in {self.parts!r}"
                raise FormatError(msg)

    @classmethod
    def parse(cls, text: str) -> ElementId:
        """Parse dotted text into an id. Empty segments are rejected."""
        return cls(tuple(str(text).split(SEPARATOR)))

    @classmethod
    def coerce(cls, value: str | int | ElementId) -> ElementId:
        """Accept an id, dotted text, or an integer (ids loaded from documents)."""
        if isinstance(value, ElementId):
            return value
        return cls.parse(str(value))

    @property
    def name(self) -> str:
        """Last segment (the port name for gadget ports)."""
        return self.parts[-1]

    @property
    def parent(self) -> ElementId | None:
        if len(self.parts) == 1:
            return None
        return ElementId(self.parts[:-1])

    def child(self, *names: str) -> ElementId:
        """Return a descendant id with *names* appended."""
        return ElementId(self.parts + tuple(names))

    def within(self, prefix: ElementId | None) -> ElementId:
        """Return this id nested under *prefix* (a group namespace)."""
        if prefix is None:
            return self
        return ElementId(prefix.parts + self.parts)

    def __str__(self) -> str:
        return SEPARATOR.join(self.parts)

    def __repr__(self) -> str:
        return f"ElementId({str(self)!r})"


IdLike: TypeAlias = str | int | ElementId
