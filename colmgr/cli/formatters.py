"""Rich and JSON formatting for CLI output."""

from __future__ import annotations

from typing import Any

import msgspec
from rich.box import ROUNDED
from rich.panel import Panel
from rich.table import Table

from colmgr.core.models import PageResult, RepositoryObject


def format_members_table(result: PageResult, title: str | None = None) -> Table:
    """Format a page of collection members as a Rich table.

    Args:
        result: Page of members
        title: Table title

    Returns:
        Rich Table object
    """
    table = Table(
        title=title,
        caption=f"Page {result.page + 1} of {max(result.pages, 1)} "
        f"({result.total} members)",
        box=ROUNDED,
        show_header=True,
        header_style="bold cyan",
        title_style="bold",
        row_styles=["none", "dim"],
    )
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("PID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Owner", style="green")
    table.add_column("Modified", style="yellow")

    if not result.items:
        table.add_row("", "[dim]No members[/dim]", "", "", "")
        return table

    offset = result.page * result.limit
    for i, item in enumerate(result.items):
        table.add_row(
            str(offset + i + 1),
            item.pid,
            item.title or "[dim]-[/dim]",
            item.owner or "",
            item.modified.strftime("%Y-%m-%d %H:%M") if item.modified else "",
        )
    return table


def format_object_panel(obj: RepositoryObject, parents: list[str]) -> Panel:
    """Format a repository object and its parents as a panel."""
    lines = [
        f"[bold]PID:[/bold] {obj.pid}",
        f"[bold]Label:[/bold] {obj.label or ''}",
        f"[bold]Owner:[/bold] {obj.owner or ''}",
        f"[bold]State:[/bold] {obj.state or '-'}",
    ]
    if obj.models:
        lines.append(f"[bold]Models:[/bold] {', '.join(obj.models)}")
    if obj.modified:
        lines.append(f"[bold]Modified:[/bold] {obj.modified.isoformat()}")
    if parents:
        lines.append(f"[bold]Collections:[/bold] {', '.join(parents)}")
    return Panel("\n".join(lines), title=obj.label or obj.pid, box=ROUNDED)


def to_json(data: Any) -> str:
    """Encode data as indented JSON."""
    return msgspec.json.format(msgspec.json.encode(data), indent=2).decode()
