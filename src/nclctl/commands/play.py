"""Command: apply a sequence of edge reversals to a circuit."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from nclctl.commands._base import NclCommand, strict_option

if TYPE_CHECKING:
    from nclctl.commands._context import AppContext


@click.command(
    cls=NclCommand,
    examples="""\
  nclctl play --qbf "exists x : (x)" start wire.x.out
  nclctl play circuits/and.yaml ab bc
  nclctl play --force circuits/and.yaml ab""",
)
@click.argument("args", nargs=-1)
@click.option("--qbf", default=None, help="Compile this QBF instead of loading a file.")
@click.option("--force", is_flag=True, help="Apply every move, even illegal ones.")
@strict_option
@click.pass_obj
def play(
    app: AppContext,
    args: tuple[str, ...],
    qbf: str | None,
    force: bool,
    strict: bool | None,
) -> None:
    """Load FILE (or --qbf) and reverse each EDGE in order.

    Usage: nclctl play [FILE] EDGE... Moves that leave an endpoint
    unsatisfied are reverted unless --force is given or
    ``[play] revert_illegal`` is false.
    """
    moves = list(args)
    path = None
    if qbf is None:
        if not moves:
            raise click.UsageError("Missing FILE (or --qbf).")
        path = app.resolve(moves.pop(0))
    force = force or not app.settings.play.revert_illegal
    strict = app.loader_strict(strict)
    app.emit(app.service().play(moves, path=path, qbf=qbf, force=force, strict=strict))
