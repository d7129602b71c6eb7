"""CLI: line-msg send push|multicast|narrowcast|broadcast"""

import click
from rich.console import Console

from line_messaging.models.batch import MessageBatch
from line_messaging.models.filter import (
    AGE_BUCKETS,
    APP_TYPES,
    GENDERS,
    SUBSCRIPTION_PERIODS,
    AgeFilter,
    AppTypeFilter,
    AreaFilter,
    AudienceRecipient,
    GenderFilter,
    Limit,
    SubscriptionPeriodFilter,
    demographic_and,
    recipient_or,
)
from line_messaging.models.message import TextMessage
from line_messaging.models.response import DeliveryResponse

console = Console()


def _get_client():
    from line_messaging.cli.main import _get_client
    return _get_client()


def _run(coro):
    from line_messaging.cli.main import _run
    return _run(coro)


def _text_batch(texts: tuple[str, ...]) -> MessageBatch:
    return MessageBatch.of(*(TextMessage(text=t) for t in texts))


def _print_result(result: DeliveryResponse, json_output: bool) -> None:
    if json_output:
        click.echo(result.model_dump_json(indent=2, exclude={"raw_body"}))
    elif result.ok:
        suffix = f" (request id {result.request_id})" if result.request_id else ""
        console.print(f"[green]Accepted: HTTP {result.status}{suffix}[/green]")
    else:
        console.print(f"[red]HTTP {result.status}: {result.system_message or result.raw_body[:200]}[/red]")
        for detail in result.error.details if result.error else []:
            console.print(f"  [dim]{detail.property}: {detail.message}[/dim]")
    if not result.ok:
        raise SystemExit(1)


@click.group()
def send():
    """Send text messages (up to five per request)."""


@send.command("push")
@click.argument("to")
@click.argument("texts", nargs=-1, required=True)
@click.option("--silent", is_flag=True, help="Disable push notification")
@click.option("--json-output", "--json", is_flag=True)
def send_push(to, texts, silent, json_output):
    """Send to one user, group or room."""

    client = _get_client()

    async def _push():
        batch = _text_batch(texts)
        async with client:
            with console.status("Sending..."):
                result = await client.push(to, batch, notification_disabled=silent or None)
        return result

    _print_result(_run(_push()), json_output)


@send.command("multicast")
@click.argument("texts", nargs=-1, required=True)
@click.option("--to", "to", multiple=True, required=True, help="User id (repeatable)")
@click.option("--silent", is_flag=True, help="Disable push notification")
@click.option("--json-output", "--json", is_flag=True)
def send_multicast(texts, to, silent, json_output):
    """Send to several user ids."""

    client = _get_client()

    async def _multicast():
        batch = _text_batch(texts)
        async with client:
            with console.status("Sending..."):
                result = await client.multicast(list(to), batch, notification_disabled=silent or None)
        return result

    _print_result(_run(_multicast()), json_output)


@send.command("broadcast")
@click.argument("texts", nargs=-1, required=True)
@click.option("--silent", is_flag=True, help="Disable push notification")
@click.option("--json-output", "--json", is_flag=True)
def send_broadcast(texts, silent, json_output):
    """Send to every friend of the account."""

    client = _get_client()

    async def _broadcast():
        batch = _text_batch(texts)
        async with client:
            with console.status("Broadcasting..."):
                result = await client.broadcast(batch, notification_disabled=silent or None)
        return result

    _print_result(_run(_broadcast()), json_output)


@send.command("narrowcast")
@click.argument("texts", nargs=-1, required=True)
@click.option("--audience", type=int, multiple=True, help="Audience group id (repeatable, OR-ed)")
@click.option("--gender", multiple=True, type=click.Choice(GENDERS))
@click.option("--app-type", multiple=True, type=click.Choice(APP_TYPES))
@click.option("--area", multiple=True, help="Region code such as jp_13 (repeatable)")
@click.option("--age-gte", type=click.Choice(AGE_BUCKETS), default=None)
@click.option("--age-lt", type=click.Choice(AGE_BUCKETS), default=None)
@click.option("--friend-for", type=click.Choice(SUBSCRIPTION_PERIODS), default=None,
              help="Only friends of at least this long")
@click.option("--max", "max_", type=click.IntRange(min=1), default=None, help="Maximum number of recipients")
@click.option("--json-output", "--json", is_flag=True)
def send_narrowcast(texts, audience, gender, app_type, area, age_gte, age_lt, friend_for, max_, json_output):
    """Send to friends matching audience groups and demographics (all conditions AND-ed)."""

    client = _get_client()

    async def _narrowcast():
        batch = _text_batch(texts)
        recipient = None
        if len(audience) == 1:
            recipient = AudienceRecipient(audience[0])
        elif audience:
            recipient = recipient_or(*(AudienceRecipient(a) for a in audience))

        leaves = []
        if gender:
            leaves.append(GenderFilter(gender))
        if app_type:
            leaves.append(AppTypeFilter(app_type))
        if area:
            leaves.append(AreaFilter(area))
        if age_gte or age_lt:
            leaves.append(AgeFilter(gte=age_gte, lt=age_lt))
        if friend_for:
            leaves.append(SubscriptionPeriodFilter(gte=friend_for))
        demographic = None
        if len(leaves) == 1:
            demographic = leaves[0]
        elif leaves:
            demographic = demographic_and(*leaves)

        limit = Limit(max=max_) if max_ is not None else None
        async with client:
            with console.status("Sending..."):
                result = await client.narrowcast(batch, recipient=recipient, filter=demographic, limit=limit)
        return result

    _print_result(_run(_narrowcast()), json_output)
