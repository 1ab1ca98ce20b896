"""Main CLI entry point and application setup."""

import logging
from dataclasses import dataclass
from pathlib import Path

import click
import msgspec
from click.exceptions import Exit
from rich.console import Console

from colmgr import __version__
from colmgr.cli.commands import membership, objects
from colmgr.config import ColmgrConfig, load_config
from colmgr.core.exceptions import ColmgrError
from colmgr.system import CollectionSystem


@dataclass
class Context:
    """CLI context that holds shared resources."""

    system: CollectionSystem
    config: ColmgrConfig
    console: Console
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


class ColmgrGroup(click.Group):
    """Custom group that reports repository errors without tracebacks."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except (ColmgrError, ValueError) as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {e}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=ColmgrGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--data-dir",
    "-d",
    type=click.Path(path_type=Path),
    help="Override data directory location",
)
@click.version_option(
    version=__version__, prog_name="colmgr", message="colmgr version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config_path: Path | None,
    data_dir: Path | None,
) -> None:
    """Repository collection management tool.

    Manage collection membership, list collection members and search
    collections in a Fedora-style digital repository.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    console = create_console(no_color=no_color)

    try:
        config = load_config(config_path)
        if data_dir:
            config = msgspec.structs.replace(config, data_dir=str(data_dir))
        system = CollectionSystem(config)
    except Exception as e:
        if debug:
            raise
        console.print(f"[red]Error initializing application:[/red] {e}")
        ctx.exit(1)

    ctx.obj = Context(system=system, config=config, console=console, debug=debug)
    ctx.call_on_close(system.close)


# Register commands
cli.add_command(objects.create)
cli.add_command(objects.show)
cli.add_command(membership.add)
cli.add_command(membership.remove)
cli.add_command(membership.migrate)
cli.add_command(membership.parents)
cli.add_command(membership.members)
cli.add_command(membership.search)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
