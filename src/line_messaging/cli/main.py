"""
LINE Messaging CLI — `line-msg` command.

Commands:
  line-msg auth login|status|logout   Store the channel access token
  line-msg send <kind> ...            push / multicast / narrowcast / broadcast text
  line-msg insight <cmd>              Narrowcast progress, quota, delivery counts
  line-msg content <message-id>       Download media a user sent
"""

import asyncio
import json
import os
from pathlib import Path

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install line-messaging[cli]")

from line_messaging import __version__
from line_messaging.client import AsyncLineMessaging
from line_messaging.errors import LineMessagingError
from line_messaging.messaging import DEFAULT_API_BASE_URL

console = Console()
CONFIG_FILE = Path.home() / ".line-messaging" / "config.json"
TOKEN_ENV = "LINE_CHANNEL_ACCESS_TOKEN"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _get_client() -> AsyncLineMessaging:
    cfg = _load_config()
    token = os.environ.get(TOKEN_ENV) or cfg.get("channel_access_token")
    if not token:
        console.print(f"[red]No channel access token. Run `line-msg auth login` or set {TOKEN_ENV}.[/red]")
        raise SystemExit(1)
    return AsyncLineMessaging(
        channel_access_token=token,
        api_base_url=cfg.get("api_base_url", DEFAULT_API_BASE_URL),
    )


def _run(coro):
    try:
        return asyncio.run(coro)
    except LineMessagingError as e:
        console.print(f"[red]{e.code}: {e}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option(__version__)
def main():
    """LINE Messaging CLI — compose and deliver messages from the shell."""


# Register subcommands from separate modules
from line_messaging.cli.auth import auth
from line_messaging.cli.send import send
from line_messaging.cli.insight import insight, content_cmd

main.add_command(auth)
main.add_command(send)
main.add_command(insight)
main.add_command(content_cmd)


if __name__ == "__main__":
    main()
