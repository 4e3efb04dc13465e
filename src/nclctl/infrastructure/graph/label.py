"""Label: free-standing annotation text. Purely cosmetic."""

from __future__ import annotations

from dataclasses import dataclass

from nclctl.domain.geometry import Point
from nclctl.domain.ids import ElementId
from nclctl.domain.types import Align


@dataclass
class Label:
    id: ElementId
    position: Point
    text: str = ""
    halign: Align = Align.CENTER
    valign: Align = Align.CENTER
