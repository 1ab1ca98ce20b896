"""Repository object CLI commands."""

import click

from colmgr.cli.formatters import format_object_panel, to_json
from colmgr.core.vocabulary import COLLECTION_CONTENT_MODEL, ObjectState


@click.command()
@click.argument("pid")
@click.option("--label", "-l", required=True, help="Object label")
@click.option("--owner", "-o", help="Owner ID")
@click.option(
    "--model",
    "-m",
    "models",
    multiple=True,
    help="Content model PID (repeatable)",
)
@click.option(
    "--collection",
    "is_collection",
    is_flag=True,
    help=f"Add the {COLLECTION_CONTENT_MODEL} content model",
)
@click.option(
    "--state",
    type=click.Choice([s.value for s in ObjectState], case_sensitive=False),
    default=ObjectState.ACTIVE.value,
    show_default=True,
    help="Initial object state",
)
@click.pass_context
def create(
    ctx: click.Context,
    pid: str,
    label: str,
    owner: str | None,
    models: tuple[str, ...],
    is_collection: bool,
    state: str,
) -> None:
    """Create a repository object."""
    console = ctx.obj.console
    system = ctx.obj.system

    models = list(models)
    if is_collection and COLLECTION_CONTENT_MODEL not in models:
        models.append(COLLECTION_CONTENT_MODEL)

    obj = system.objects.create_object(
        pid, label=label, owner=owner, models=models, state=state
    )
    console.print(f"[green]✓[/green] Created {obj.pid}")


@click.command()
@click.argument("pid")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["panel", "json"]),
    default="panel",
    help="Output format",
)
@click.pass_context
def show(ctx: click.Context, pid: str, output_format: str) -> None:
    """Show a repository object and its collections."""
    console = ctx.obj.console
    system = ctx.obj.system

    obj = system.objects.get_object(pid)
    parents = system.membership.get_parent_pids(obj)

    if output_format == "json":
        click.echo(to_json({**obj.to_dict(), "collections": parents}))
    else:
        console.print(format_object_panel(obj, parents))
