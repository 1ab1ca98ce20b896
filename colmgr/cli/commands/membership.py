"""Collection membership CLI commands."""

import click

from colmgr.cli.formatters import format_members_table, to_json
from colmgr.query.base import FilterMode


@click.command()
@click.argument("member")
@click.argument("collection")
@click.pass_context
def add(ctx: click.Context, member: str, collection: str) -> None:
    """Add MEMBER to COLLECTION."""
    console = ctx.obj.console

    if ctx.obj.system.membership.add_to_collection(member, collection):
        console.print(f"[green]✓[/green] Added {member} to {collection}")
    else:
        console.print(f"[yellow]{member} is already in {collection}[/yellow]")


@click.command()
@click.argument("member")
@click.argument("collection")
@click.pass_context
def remove(ctx: click.Context, member: str, collection: str) -> None:
    """Remove MEMBER from COLLECTION."""
    console = ctx.obj.console

    if ctx.obj.system.membership.remove_from_collection(member, collection):
        console.print(f"[green]✓[/green] Removed {member} from {collection}")
    else:
        console.print(f"[yellow]{member} is not in {collection}[/yellow]")


@click.command()
@click.argument("member")
@click.argument("source")
@click.argument("target")
@click.pass_context
def migrate(ctx: click.Context, member: str, source: str, target: str) -> None:
    """Move MEMBER from SOURCE collection to TARGET collection."""
    console = ctx.obj.console

    if ctx.obj.system.membership.migrate(member, source, target):
        console.print(f"[green]✓[/green] Moved {member} from {source} to {target}")
    else:
        console.print("[yellow]Nothing to change[/yellow]")


@click.command()
@click.argument("pid")
@click.option("--exclude", "-x", help="Leave out this parent collection")
@click.pass_context
def parents(ctx: click.Context, pid: str, exclude: str | None) -> None:
    """List the collections PID belongs to."""
    membership = ctx.obj.system.membership

    if exclude:
        result = membership.get_other_parents(pid, exclude)
    else:
        result = membership.get_parent_pids(pid)

    for parent in result:
        click.echo(parent)


@click.command()
@click.argument("collection")
@click.option("--page", "-p", type=int, default=0, help="Zero-based page number")
@click.option("--limit", "-n", type=int, help="Page size")
@click.option("--manage", is_flag=True, help="Include inactive members")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_context
def members(
    ctx: click.Context,
    collection: str,
    page: int,
    limit: int | None,
    manage: bool,
    output_format: str,
) -> None:
    """List the members of COLLECTION one page at a time."""
    console = ctx.obj.console

    result = ctx.obj.system.lister.list_members(
        collection,
        page=page,
        limit=limit,
        filter_mode=FilterMode.MANAGE if manage else FilterMode.VIEW,
    )

    if output_format == "json":
        click.echo(to_json(result.to_dict()))
    else:
        console.print(format_members_table(result, title=f"Members of {collection}"))


@click.command()
@click.argument("text", default="")
@click.pass_context
def search(ctx: click.Context, text: str) -> None:
    """Search collections by label or PID, printing JSON."""
    click.echo(to_json(ctx.obj.system.lister.search_collections(text)))
