"""AppContext, the shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns logging setup and result emission (stdout/stderr
routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from nclctl.config.logging import configure_logging
from nclctl.output.formatters import OutputSettings, format_result
from nclctl.services.circuit import CircuitService
from nclctl.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from pathlib import Path

    from nclctl.config.settings import NclSettings
    from nclctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: NclSettings) -> None:
        self.settings = settings
        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )
        if settings.verbose:
            enable_telemetry()

    def service(self) -> CircuitService:
        """A CircuitService over a fresh graph."""
        return CircuitService()

    def resolve(self, path: str) -> Path:
        """Resolve a command-line path against the configured root."""
        return self.settings.root / path

    def loader_strict(self, flag: bool | None) -> bool:
        """The loader policy: an explicit --strict/--lenient, else ``[loader] strict``."""
        return self.settings.loader.strict if flag is None else flag

    def emit(self, result: ServiceResult) -> None:
        """Output a ServiceResult with the right exit semantics.

        * Success: stdout. With ``--quiet`` (and not ``--json``) loader
          warnings are repeated on stderr, since quiet output omits them.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
            show_hidden=self.settings.display.show_hidden,
            max_listed=self.settings.display.max_listed,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output and settings.quiet:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
