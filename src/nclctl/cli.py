"""The ``nclctl`` entry point: global flags, settings and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from nclctl import __version__
from nclctl.commands import register_commands
from nclctl.commands._base import NclGroup
from nclctl.commands._context import AppContext
from nclctl.config.settings import NclSettings


@click.group(
    cls=NclGroup,
    invoke_without_command=True,
    examples="""\
  nclctl compile "forall x : (x || !x)"
  nclctl --root circuits inspect and.yaml
  nclctl --show-hidden inspect and.yaml
  nclctl play --qbf "exists x : (x)" start""",
)
@click.version_option(version=__version__, prog_name="nclctl")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only unsatisfied vertex ids.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and telemetry spans.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("-c", "--config", "config_path", default=None, help="Use this config file.")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Resolve FILE arguments here and search for config from here.",
)
@click.option("--show-hidden", is_flag=True, help="List hidden vertices in reports.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    root: Path | None,
    show_hidden: bool,
) -> None:
    """Build, inspect and play Nondeterministic Constraint Logic circuits."""
    ctx.obj = AppContext(
        NclSettings.from_cli(
            config_path=config_path,
            root=root,
            show_hidden=show_hidden,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
