"""CLI: line-msg insight status|quota|count, line-msg content"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from line_messaging.messaging import DELIVERY_COUNT_KINDS

console = Console()


def _get_client():
    from line_messaging.cli.main import _get_client
    return _get_client()


def _run(coro):
    from line_messaging.cli.main import _run
    return _run(coro)


@click.group()
def insight():
    """Delivery progress and usage."""


@insight.command("status")
@click.argument("request_id")
@click.option("--json-output", "--json", is_flag=True)
def insight_status(request_id, json_output):
    """Show the progress of a narrowcast."""
    client = _get_client()

    async def _status():
        async with client:
            return await client.get_narrowcast_status(request_id)

    progress = _run(_status())
    if json_output:
        click.echo(progress.model_dump_json(indent=2, exclude={"raw_body"}))
        return
    table = Table(title=f"Narrowcast {request_id}")
    table.add_column("Phase", style="bold")
    table.add_column("Target")
    table.add_column("Success")
    table.add_column("Failure")
    table.add_row(
        progress.phase.value,
        str(progress.target_count if progress.target_count is not None else "-"),
        str(progress.success_count if progress.success_count is not None else "-"),
        str(progress.failure_count if progress.failure_count is not None else "-"),
    )
    console.print(table)
    if progress.failed_description:
        console.print(f"[red]{progress.failed_description}[/red]")


@insight.command("quota")
def insight_quota():
    """Show this month's message limit and usage."""
    client = _get_client()

    async def _quota():
        async with client:
            return await client.get_quota(), await client.get_quota_consumption()

    quota, consumption = _run(_quota())
    limit = "unlimited" if quota.type == "none" else str(quota.value)
    console.print(f"Used [bold]{consumption.total_usage}[/bold] of {limit} messages this month")


@insight.command("count")
@click.argument("kind", type=click.Choice(list(DELIVERY_COUNT_KINDS)))
@click.argument("date")
def insight_count(kind, date):
    """Messages of KIND sent on DATE (yyyyMMdd)."""
    client = _get_client()

    async def _count():
        async with client:
            return await client.get_delivery_count(kind, date)

    count = _run(_count())
    if count.success is None:
        console.print(f"[yellow]Count not available yet ({count.count_status.value})[/yellow]")
    else:
        console.print(f"{kind} on {date}: [bold]{count.success}[/bold]")


@click.command("content")
@click.argument("message_id")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
def content_cmd(message_id, output: Optional[Path]):
    """Download the image, video, audio or file a user sent."""
    client = _get_client()

    async def _content():
        async with client:
            with console.status("Downloading..."):
                return await client.get_content(message_id)

    result = _run(_content())
    if not 200 <= result.status < 300:
        console.print(f"[red]HTTP {result.status}: {result.system_message[:200]}[/red]")
        raise SystemExit(1)
    target = output or Path(message_id)
    target.write_bytes(result.content)
    console.print(f"[green]Saved {len(result.content)} bytes to {target}[/green]")
