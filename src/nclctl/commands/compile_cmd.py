"""Command: compile a QBF into an NCL circuit."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from nclctl.commands._base import NclCommand

if TYPE_CHECKING:
    from nclctl.commands._context import AppContext


@click.command(
    "compile",
    cls=NclCommand,
    examples="""\
  nclctl compile "exists x : (x)"
  nclctl compile "forall x exists y : (x || y) && (!x || !y)"
  nclctl --json compile "forall a : (a || !a)" | jq .data.truth""",
)
@click.argument("qbf")
@click.pass_obj
def compile_cmd(app: AppContext, qbf: str) -> None:
    """Compile QBF and summarise the resulting circuit."""
    app.emit(app.service().compile(qbf))
