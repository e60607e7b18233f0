"""Command dispatcher — one command per invocation, returns the exit code."""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable
from typing import Any

from gmail_cli.cli.args import CommandOptions, ParsedCommand
from gmail_cli.cli.render import (
    echo,
    err_console,
    formatted_results,
    print_help,
    print_json,
    print_json_error,
    print_messages_summary,
    print_profile_summary,
    print_read_summary,
)
from gmail_cli.config import Settings
from gmail_cli.gmail.client import ApiError, CredentialMissing, GmailClient
from gmail_cli.gmail.host import TokenHost
from gmail_cli.gmail.types import ActionOutcome

logger = logging.getLogger(__name__)

PROG = "gmail"

_LIST_DEFAULT_MAX = 10
_UNREAD_DEFAULT_MAX = 50
_EMPTY_LISTING = {"messages": [], "resultSizeEstimate": 0}


class UsageError(Exception):
    """Raised when a command is missing required positional arguments."""

    def __init__(self, message: str, usage: str) -> None:
        self.usage = usage
        super().__init__(message)


# ── Command handlers ───────────────────────────────────────────────────────────


def _profile(client: GmailClient, args: tuple[str, ...], opts: CommandOptions) -> int:
    profile = client.get_profile()
    if opts.summary:
        print_profile_summary(profile)
    else:
        print_json(profile)
    return 0


def _show_listing(
    client: GmailClient,
    listing: dict[str, Any],
    opts: CommandOptions,
    *,
    empty_message: str,
    fetch_content: bool,
) -> int:
    messages = listing.get("messages") or []
    if not messages:
        if opts.summary:
            echo(empty_message)
        else:
            print_json(_EMPTY_LISTING)
        return 0

    if not fetch_content:
        print_json(listing)
        return 0

    results = client.get_messages([m["id"] for m in messages], "full")
    if opts.summary:
        print_messages_summary(results)
    else:
        print_json(formatted_results(results))
    return 0


def _list(client: GmailClient, args: tuple[str, ...], opts: CommandOptions) -> int:
    listing = client.list_messages(
        q=opts.query,
        max_results=opts.max_results or _LIST_DEFAULT_MAX,
        page_token=opts.page_token,
        label_ids=opts.label_ids,
    )
    # Without --summary/--full only ids are printed; no per-message fetch.
    return _show_listing(
        client,
        listing,
        opts,
        empty_message="No messages found.",
        fetch_content=opts.summary or opts.full,
    )


def _unread(client: GmailClient, args: tuple[str, ...], opts: CommandOptions) -> int:
    listing = client.list_messages(
        q="is:unread",
        max_results=opts.max_results or _UNREAD_DEFAULT_MAX,
    )
    return _show_listing(
        client,
        listing,
        opts,
        empty_message="No unread messages - inbox is clear!",
        fetch_content=True,
    )


def _read(client: GmailClient, args: tuple[str, ...], opts: CommandOptions) -> int:
    message = client.get_message(args[0], "full")
    if opts.summary:
        print_read_summary(message)
    else:
        print_json(message)
    return 0


def _run_batch(
    ids: tuple[str, ...],
    action: Callable[[str], object],
    opts: CommandOptions,
    *,
    done: str,
    failed: str,
) -> int:
    """Apply ``action`` to each id in order; failures are recorded, not raised."""
    outcomes: list[ActionOutcome] = []
    for message_id in ids:
        try:
            action(message_id)
        except Exception as exc:  # noqa: BLE001
            logger.debug("%s: %s - %s", failed, message_id, exc)
            outcomes.append(ActionOutcome(message_id, False, str(exc)))
            if opts.summary:
                echo(f"{failed}: {message_id} - {exc}")
            continue
        outcomes.append(ActionOutcome(message_id, True))
        if opts.summary:
            echo(f"{done}: {message_id}")

    if not opts.summary:
        print_json([outcome.to_dict() for outcome in outcomes])
    return 0


def _mark_read(client: GmailClient, args: tuple[str, ...], opts: CommandOptions) -> int:
    return _run_batch(
        args, client.mark_as_read, opts,
        done="Marked as read", failed="Failed to mark as read",
    )


def _trash(client: GmailClient, args: tuple[str, ...], opts: CommandOptions) -> int:
    return _run_batch(
        args, client.trash_message, opts,
        done="Moved to trash", failed="Failed to trash",
    )


def _mark_unread(client: GmailClient, args: tuple[str, ...], opts: CommandOptions) -> int:
    message_id = args[0]
    try:
        client.mark_as_unread(message_id)
    except Exception as exc:  # noqa: BLE001
        logger.debug("mark_as_unread failed for %s: %s", message_id, exc)
        if opts.summary:
            echo(f"Failed to mark as unread: {exc}")
        else:
            print_json({"success": False, "error": str(exc)})
        return 1

    if opts.summary:
        echo(f"Marked as unread: {message_id}")
    else:
        print_json({"success": True, "messageId": message_id})
    return 0


Handler = Callable[[GmailClient, tuple[str, ...], CommandOptions], int]

# name → (handler, positional requirement, usage line)
#   requirement: 0 = none, 1 = first positional, -1 = one or more
COMMANDS: dict[str, tuple[Handler, int, str]] = {
    "profile": (_profile, 0, "profile"),
    "list": (_list, 0, "list [--max N] [-q QUERY]"),
    "unread": (_unread, 0, "unread [--max N]"),
    "read": (_read, 1, "read <messageId>"),
    "mark-read": (_mark_read, -1, "mark-read <messageId1> [messageId2...]"),
    "mark-unread": (_mark_unread, 1, "mark-unread <messageId>"),
    "trash": (_trash, -1, "trash <messageId1> [messageId2...]"),
}


def _check_positional(requirement: int, usage: str, args: tuple[str, ...]) -> None:
    if requirement == 1 and not args:
        raise UsageError("Message ID required", usage)
    if requirement == -1 and not args:
        raise UsageError("At least one message ID required", usage)


# ── Dispatcher ─────────────────────────────────────────────────────────────────


def _report_error(exc: Exception, opts: CommandOptions, settings: Settings) -> None:
    """Top-level error report, shaped by the active output mode."""
    if isinstance(exc, CredentialMissing):
        err_console.print(exc.remediation)

    if opts.summary:
        echo(f"Gmail Error: {exc}", err=True, fg="red")
        if settings.debug:
            echo("Stack trace: " + "".join(traceback.format_exception(exc)).rstrip(), err=True)
        return

    report: dict[str, Any] = {"error": str(exc)}
    if isinstance(exc, ApiError):
        report["status"] = exc.status
        if exc.data is not None:
            report["data"] = exc.data
    print_json_error(report)


def run(
    parsed: ParsedCommand,
    host: TokenHost,
    settings: Settings | None = None,
) -> int:
    """Execute one parsed command against ``host`` and return the exit code."""
    settings = settings or Settings()
    opts = CommandOptions.from_parsed(parsed)

    if not parsed.command or parsed.command == "help" or opts.help:
        print_help()
        return 0

    entry = COMMANDS.get(parsed.command)
    if entry is None:
        echo(f"Error: Unknown command '{parsed.command}'", err=True)
        echo(err=True)
        echo(f"Run: {PROG} help", err=True)
        return 1

    handler, requirement, usage = entry
    try:
        _check_positional(requirement, usage, parsed.positional)
    except UsageError as exc:
        echo(f"Error: {exc}", err=True)
        echo(f"Usage: {PROG} {exc.usage}", err=True)
        return 1

    logger.debug("Running %s %s", parsed.command, parsed.positional)
    try:
        client = GmailClient(
            host,
            token_name=settings.token_name,
            base_url=settings.base_url,
            timeout_ms=settings.timeout_ms,
        )
        return handler(client, parsed.positional, opts)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Command %s failed", parsed.command, exc_info=True)
        _report_error(exc, opts, settings)
        return 1
