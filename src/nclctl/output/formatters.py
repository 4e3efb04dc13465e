"""Output mode selection for ServiceResult.

The CLI renders a ServiceResult for humans (Rich output) or machines
(``--json``). :func:`format_result` picks the mode from
:class:`OutputSettings`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from nclctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from nclctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output flags collected from the CLI and the ``[display]`` section."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    show_hidden: bool = False
    max_listed: int = 20


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    JSON wins over quiet; quiet wins over the Rich renderers.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(
        result,
        verbose=settings.verbose,
        show_hidden=settings.show_hidden,
        max_listed=settings.max_listed,
    )
