"""Command: load a graph description and report on it."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from nclctl.commands._base import NclCommand, strict_option

if TYPE_CHECKING:
    from nclctl.commands._context import AppContext


@click.command(
    cls=NclCommand,
    examples="""\
  nclctl inspect circuits/and.yaml
  nclctl inspect circuits/and.yaml --strict
  nclctl -v inspect circuits/and.yaml""",
)
@click.argument("file", type=click.Path(dir_okay=False))
@strict_option
@click.pass_obj
def inspect(app: AppContext, file: str, strict: bool | None) -> None:
    """Load FILE and report counts, bounds, gadgets and unsatisfied vertices."""
    app.emit(app.service().inspect(app.resolve(file), strict=app.loader_strict(strict)))
