"""Command line front end for reprepro-backend."""

import functools
import logging
from pathlib import Path

import typer
from pydantic.dataclasses import dataclass

from reprepro_backend.audit import audit_build_needing, audit_multiple, audit_obsolete
from reprepro_backend.clean import clean_incoming
from reprepro_backend.config import Config, load_config
from reprepro_backend.constants import PROG_NAME
from reprepro_backend.errors import RepreproBackendError
from reprepro_backend.reprepro import Reprepro

logger = logging.getLogger(__name__)

# reprepro subcommands run unmodified against a single archive
PASSTHROUGH_COMMANDS = {
    "copy": "Copy packages between codenames of an archive.",
    "copysrc": "Copy a source package and its binaries between codenames.",
    "list": "List packages matching a name in a codename.",
    "ls": "Show the versions of a package in every codename.",
    "pull": "Pull packages between codenames according to conf/pulls.",
    "remove": "Remove binary packages from a codename.",
    "removesrc": "Remove a source package and its binaries from a codename.",
}

HELP_TEXT = f"""\
{PROG_NAME} commands:

  audit build-needing            Show source packages needing builds
  audit multiple                 Show packages present in more than one archive
  audit obsolete                 Show packages older than upstream Debian
  clean <archive>                Remove files from an archive's incoming directory
  copy <archive> <args>          reprepro copy
  copysrc <archive> <args>       reprepro copysrc
  list <archive> <args>          reprepro list
  ls <archive> <args>            reprepro ls
  pull <archive> <args>          reprepro pull
  remove <archive> <args>        reprepro remove
  removesrc <archive> <args>     reprepro removesrc
  help                           Show this summary

clean does not coordinate with uploads in progress; use --min-age to leave
recently modified files alone."""

cli = typer.Typer(
    name=PROG_NAME,
    help="Audits and pass-through commands for reprepro archives.",
    no_args_is_help=True,
    add_completion=False,
)
audit_cli = typer.Typer(help="Read-only reports across all archives.", no_args_is_help=True)
cli.add_typer(audit_cli, name="audit")


@dataclass
class CliState:
    config_path: Path | None = None
    config: Config | None = None


def reports_errors(func):
    """Turn fatal errors into a one-line message and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RepreproBackendError as e:
            typer.echo(f"{PROG_NAME}: {e}", err=True)
            raise typer.Exit(1) from e

    return wrapper


def _config(ctx: typer.Context) -> Config:
    """Load the configuration on first use, so help works with a broken config."""
    state = ctx.find_root().obj
    if state.config is None:
        state.config = load_config(state.config_path)
    return state.config


@cli.callback()
def callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file (default: $REPREPRO_CONFIG)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    ctx.obj = CliState(config_path=config)


@audit_cli.command("build-needing")
@reports_errors
def build_needing(ctx: typer.Context):
    """Show source packages that need building for each architecture."""
    for line in audit_build_needing(Reprepro(_config(ctx))):
        typer.echo(line)


@audit_cli.command("multiple")
@reports_errors
def multiple(ctx: typer.Context):
    """Show packages present in more than one archive."""
    for line in audit_multiple(Reprepro(_config(ctx))):
        typer.echo(line)


@audit_cli.command("obsolete")
@reports_errors
def obsolete(ctx: typer.Context):
    """Show packages with a newer version in Debian."""
    for line in audit_obsolete(Reprepro(_config(ctx))):
        typer.echo(line)


@cli.command("clean")
@reports_errors
def clean(
    ctx: typer.Context,
    archive: str = typer.Argument(..., help="Archive name"),
    min_age: float = typer.Option(0, "--min-age", help="Skip files modified less than this many seconds ago"),
):
    """Remove leftover files from an archive's incoming directory."""
    removed = clean_incoming(_config(ctx), archive, min_age=min_age)
    logger.info(f"Removed {len(removed)} files from {archive} incoming")


def _passthrough_command(subcommand: str):
    @reports_errors
    def command(ctx: typer.Context, archive: str = typer.Argument(..., help="Archive name")):
        status = Reprepro(_config(ctx)).passthrough(archive, subcommand, *ctx.args)
        raise typer.Exit(status)

    command.__name__ = f"{subcommand}_command"
    return command


for _name, _help in PASSTHROUGH_COMMANDS.items():
    cli.command(
        _name,
        help=_help,
        context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    )(_passthrough_command(_name))


@cli.command("help")
def help_():
    """Show a summary of the available commands."""
    typer.echo(HELP_TEXT)


def main() -> None:
    """Main entry point for the reprepro-backend CLI."""
    cli(prog_name=PROG_NAME)


if __name__ == "__main__":
    main()
