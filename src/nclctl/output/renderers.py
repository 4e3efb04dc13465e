"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`;
unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from nclctl.output.console import create_console, get_output, style_for_gate

if TYPE_CHECKING:
    from rich.console import Console

    from nclctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(
    result: ServiceResult,
    *,
    verbose: bool = False,
    show_hidden: bool = False,
    max_listed: int = 20,
) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    options = _Options(verbose=verbose, show_hidden=show_hidden, max_listed=max_listed)

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, options)
    else:
        _render_error(result, console, options)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: unsatisfied vertex ids, or the status."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    if result.unsatisfied:
        return "\n".join(result.unsatisfied)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


class _Options:
    __slots__ = ("max_listed", "show_hidden", "verbose")

    def __init__(self, *, verbose: bool, show_hidden: bool, max_listed: int) -> None:
        self.verbose = verbose
        self.show_hidden = show_hidden
        self.max_listed = max_listed


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "ncl.ok"), (f"  {result.op}", "ncl.op")))


def _field(console: Console, key: str, value: Any, style: str = "") -> None:
    console.print(Text.assemble((f"  {key}: ", "ncl.key"), (str(value), style)))


def _id_list(console: Console, title: str, ids: list[str], limit: int) -> None:
    if not ids:
        return
    shown = ids[:limit]
    console.print(Text(f"  {title} ({len(ids)}):", style="ncl.key"))
    for vid in shown:
        console.print(f"    [ncl.id]{vid}[/ncl.id]")
    if len(ids) > len(shown):
        console.print(f"    ... {len(ids) - len(shown)} more")


def _flag(value: bool) -> Text:
    return Text("active" if value else "inactive", style="ncl.active" if value else "ncl.inactive")


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text.assemble(("  warning: ", "ncl.warning"), warning))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the telemetry span tree (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"
    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)
    for phase in span_data.get("phases", []):
        _render_telemetry_tree(console, phase, indent=indent + 4)


def _render_circuit(console: Console, circuit: dict[str, Any]) -> None:
    """Formula, quantifiers and probe wires of a compiled circuit."""
    _field(console, "prefix", circuit.get("prefix", ""))
    _field(console, "formula", circuit.get("formula", ""), style="ncl.formula")
    _field(console, "quantifiers", ", ".join(circuit.get("quantifiers", [])))
    for name, probe in circuit.get("probes", {}).items():
        console.print(
            Text.assemble(
                (f"  probe {name}: ", "ncl.key"),
                f"{probe['edge']} ",
                _flag(bool(probe["active"])),
            )
        )
    _field(console, "solved", "yes" if circuit.get("solved") else "no")


def _render_counts(console: Console, counts: dict[str, int]) -> None:
    _field(console, "counts", ", ".join(f"{k}={v}" for k, v in counts.items()))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, options: _Options) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text.assemble(("ERROR", "ncl.error"), (f"  {result.op}", "ncl.op"), f"{code}: ", msg)
    )
    if options.verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_compile(result: ServiceResult, console: Console, options: _Options) -> None:
    d = result.data
    _status_line(console, result)
    _render_circuit(console, d)
    _render_counts(console, d.get("counts", {}))
    _field(console, "truth", "true" if d.get("truth") else "false")
    _id_list(console, "unsatisfied", d.get("unsatisfied", []), options.max_listed)
    if options.verbose:
        _render_meta(console, result)


def _render_inspect(result: ServiceResult, console: Console, options: _Options) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "source", d.get("source", ""))
    _render_counts(console, d.get("counts", {}))
    bounds = d.get("bounds", {})
    _field(console, "bounds", f"{bounds.get('min')} .. {bounds.get('max')}")
    _field(console, "parts", d.get("parts", 0))

    components = d.get("components", [])
    if components:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("ID", style="ncl.id", no_wrap=True)
        table.add_column("Kind")
        table.add_column("Label")
        if options.verbose:
            table.add_column("State", style="dim")
        for comp in components[: options.max_listed]:
            kind = str(comp.get("kind", ""))
            row = [
                str(comp.get("id", "")),
                f"[{style_for_gate(kind)}]{kind}[/]" if style_for_gate(kind) else kind,
                str(comp.get("label", "")),
            ]
            if options.verbose:
                row.append(json.dumps(comp.get("state", {}), ensure_ascii=False))
            table.add_row(*row)
        console.print(table)

    if "circuit" in d:
        _render_circuit(console, d["circuit"])
    if options.show_hidden:
        _id_list(console, "hidden", d.get("hidden", []), options.max_listed)
    _id_list(console, "unsatisfied", d.get("unsatisfied", []), options.max_listed)
    _render_warnings(console, result)
    if options.verbose:
        _render_meta(console, result)


def _render_play(result: ServiceResult, console: Console, options: _Options) -> None:
    d = result.data
    _status_line(console, result)
    for i, move in enumerate(d.get("moves", []), start=1):
        mark = ("kept", "ncl.ok") if move["kept"] else ("rejected", "ncl.warning")
        console.print(
            Text.assemble(
                (f"  {i:>3}. ", "ncl.key"),
                (move["edge"], "ncl.id"),
                f"  {move['from']} -> {move['to']}  ",
                mark,
            )
        )
    for cid, latch in d.get("latches", {}).items():
        _field(console, f"latch {cid}", "set" if latch else "clear")
    if "circuit" in d:
        _render_circuit(console, d["circuit"])
    _id_list(console, "unsatisfied", d.get("unsatisfied", []), options.max_listed)
    _render_warnings(console, result)
    if options.verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, options: _Options) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":"), ensure_ascii=False))
        else:
            _field(console, key, value)
    if options.verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "compile": _render_compile,
    "inspect": _render_inspect,
    "play": _render_play,
}
