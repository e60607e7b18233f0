"""Output rendering — message text and JSON via click, help and framing via rich."""

from __future__ import annotations

import json
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any

import click
from rich.console import Console

from gmail_cli.gmail.formatter import format_message
from gmail_cli.gmail.types import FetchFailed, FetchResult

# Framing only. Lines carrying message text go through click.echo: rich expands
# tabs and drops carriage returns.
console = Console(markup=False, emoji=False, highlight=False, soft_wrap=True)
err_console = Console(stderr=True, markup=False, emoji=False, highlight=False, soft_wrap=True)

_PREVIEW_CHARS = 100
_RAW_DATE_CHARS = 30


def print_json(data: Any) -> None:
    """Write ``data`` to stdout as indented JSON."""
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def echo(text: str = "", *, err: bool = False, **styles: Any) -> None:
    """Write a line verbatim; ``styles`` are applied only on a terminal."""
    if styles:
        click.secho(text, err=err, **styles)
    else:
        click.echo(text, err=err)


def print_json_error(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False), err=True)


def short_sender(sender: str) -> str:
    """Display name part of a From header: ``"Alice <a@x>"`` → ``"Alice"``."""
    return sender.split("<", 1)[0].strip() or sender


def local_date(raw: str) -> str:
    """Render a Date header in local time, or its first 30 chars if unparseable."""
    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        try:
            parsed = datetime.fromisoformat(raw.strip())
        except ValueError:
            return raw[:_RAW_DATE_CHARS]
    local = parsed.astimezone()
    return f"{local:%x} {local:%X}"


def preview(snippet: str) -> str:
    return f"{snippet[:_PREVIEW_CHARS]}..."


def print_messages_summary(results: list[FetchResult]) -> None:
    """Numbered human summary of a batch fetch; failures render inline."""
    console.print(f"Found {len(results)} message(s):")
    console.print()

    for index, result in enumerate(results, start=1):
        if isinstance(result, FetchFailed):
            echo(f"{index}. [Error: {result.error}]", fg="red")
            continue

        msg = format_message(result.message)
        marker = "[UNREAD] " if msg.is_unread else ""
        echo(f"{index}. {marker}{msg.subject}", bold=msg.is_unread or None)
        echo(f"   From: {short_sender(msg.sender)}")
        if msg.date:
            echo(f"   Date: {local_date(msg.date)}")
        if msg.snippet:
            echo(f"   Preview: {preview(msg.snippet)}")
        echo()


def formatted_results(results: list[FetchResult]) -> list[dict[str, Any]]:
    """JSON shape of a batch fetch: formatted messages and ``{id, error}`` entries."""
    return [
        result.to_dict() if isinstance(result, FetchFailed) else format_message(result.message).to_dict()
        for result in results
    ]


def print_read_summary(message: dict[str, Any]) -> None:
    msg = format_message(message)
    echo(f"Subject: {msg.subject}")
    echo(f"From: {msg.sender}")
    echo(f"Date: {msg.date}")
    echo(f"Labels: {', '.join(msg.labels)}")
    echo()
    echo("Content:")
    echo(msg.snippet)


def print_profile_summary(profile: dict[str, Any]) -> None:
    echo(f"Gmail Account: {profile.get('emailAddress')}")
    echo(f"Total messages: {profile.get('messagesTotal')}")
    echo(f"Total threads: {profile.get('threadsTotal')}")
    echo(f"History ID: {profile.get('historyId')}")


HELP_TEXT = """\
Gmail CLI

USAGE:
  gmail <command> [options]

COMMANDS:
  profile                    Get Gmail profile info
  list [options]             List recent messages
  unread [options]           Show unread messages
  read <messageId>           Read specific message
  mark-read <id1> [id2...]   Mark messages as read
  mark-unread <id>           Mark message as unread
  trash <id1> [id2...]       Move messages to trash

OPTIONS:
  --max <number>             Maximum results (default: 10, unread: 50)
  --summary                  Human-readable output
  --json                     Raw JSON output (default)
  --full                     Include full message content (list)
  -q, --query <query>        Search query (list)
  --label <ID[,ID...]>       Restrict to label IDs (list)
  --page-token <token>       Fetch the page after a previous listing (list)

EXAMPLES:
  gmail profile --summary
  gmail list --max 5 --summary
  gmail unread --summary
  gmail list -q "from:someone@example.com"
  gmail read 1234567890abcdef
  gmail mark-read 1234567890abcdef

TOKEN SETUP:
  Tokens are configured in ~/.config/opencode-lite/permissions.json
  Environment variables needed:
    GMAIL_CLIENT_ID       - OAuth client ID
    GMAIL_CLIENT_SECRET   - OAuth client secret
    GMAIL_REFRESH_TOKEN   - OAuth refresh token
    GMAIL_ACCESS_TOKEN    - (optional) Current access token
"""


def print_help() -> None:
    console.print(HELP_TEXT, end="")
