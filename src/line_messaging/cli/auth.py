"""CLI: line-msg auth login|status|logout"""

from typing import Optional

import click
from rich.console import Console

console = Console()


def _load_config() -> dict:
    from line_messaging.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from line_messaging.cli.main import _save_config
    _save_config(cfg)


@click.group()
def auth():
    """Channel access token commands."""


@auth.command("login")
@click.option("--api-base-url", default=None, help="Messaging API base URL")
def auth_login(api_base_url: Optional[str]):
    """Save a channel access token."""
    cfg = _load_config()
    token = click.prompt("Channel access token", hide_input=True).strip()
    if not token:
        console.print("[red]Token must not be empty.[/red]")
        raise SystemExit(1)
    updated = {**cfg, "channel_access_token": token}
    if api_base_url:
        updated["api_base_url"] = api_base_url
    _save_config(updated)
    console.print("[green]Token saved to ~/.line-messaging/config.json[/green]")


@auth.command("status")
def auth_status():
    """Show whether a token is configured."""
    cfg = _load_config()
    token = cfg.get("channel_access_token")
    if token:
        console.print(f"[green]Token configured[/green] (…{token[-4:]})")
    else:
        console.print("[yellow]No token. Run `line-msg auth login`.[/yellow]")


@auth.command("logout")
def auth_logout():
    """Clear the saved token."""
    _save_config({})
    console.print("[green]Token removed.[/green]")
