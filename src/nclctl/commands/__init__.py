"""Subcommand modules for nclctl.

register_commands() uses deferred imports to keep ``nclctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from nclctl.commands.compile_cmd import compile_cmd
    from nclctl.commands.inspect import inspect
    from nclctl.commands.play import play

    cli.add_command(compile_cmd)
    cli.add_command(inspect)
    cli.add_command(play)
