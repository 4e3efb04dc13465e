"""Shared Click pieces for nclctl commands.

``NclCommand`` and ``NclGroup`` accept an ``examples`` text shown by an
eager ``--examples`` flag, so ``--help`` stays short. ``strict_option`` is
the loader failure-policy switch used by every command that reads a
description.
"""

from __future__ import annotations

from typing import Any

import click

strict_option = click.option(
    "--strict/--lenient",
    default=None,
    help="Fail on the first bad entry instead of skipping it (default: [loader] strict).",
)


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = getattr(ctx.command, "examples", None) or ""
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(examples)
    ctx.exit(0)


class _ExamplesMixin:
    """Adds ``--examples`` when the command is declared with examples."""

    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_print_examples,
                    help="Show usage examples.",
                )
            )


class NclCommand(_ExamplesMixin, click.Command):
    pass


class NclGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands default to :class:`NclCommand`."""

    command_class = NclCommand
