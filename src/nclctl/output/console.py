"""Rich Console factory and theme for nclctl output.

Consoles render to a StringIO buffer so renderers return plain strings.
In non-TTY environments (tests, pipes) Rich disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

NCL_THEME = Theme(
    {
        "ncl.ok": "bold green",
        "ncl.error": "bold red",
        "ncl.warning": "bold yellow",
        "ncl.op": "bold cyan",
        "ncl.key": "dim",
        "ncl.id": "bold blue",
        "ncl.formula": "bold",
        "ncl.active": "green",
        "ncl.inactive": "dim",
        "ncl.gate.converter": "magenta",
        "ncl.gate.existential": "cyan",
        "ncl.gate.universal": "yellow",
        "ncl.gate.cnf": "green",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    return Console(
        file=StringIO(),
        theme=NCL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_gate(kind: str) -> str:
    """Rich style name for a gadget kind; plain vertices get none."""
    if kind in {"converter", "existential", "universal", "cnf"}:
        return f"ncl.gate.{kind}"
    return ""
