"""Projection of provider message objects into ``FormattedMessage``."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from gmail_cli.gmail.types import FormattedMessage


def get_header(headers: Sequence[Mapping[str, Any]], name: str) -> str:
    """Return the value of the first header named exactly ``name``, or ``""``."""
    for header in headers:
        if header.get("name") == name:
            return str(header.get("value") or "")
    return ""


def format_message(message: Mapping[str, Any]) -> FormattedMessage:
    """Normalise a Gmail message. The input is left untouched."""
    payload = message.get("payload") or {}
    headers = payload.get("headers") or []

    return FormattedMessage(
        id=str(message.get("id", "")),
        thread_id=str(message.get("threadId", "")),
        subject=get_header(headers, "Subject") or "No subject",
        sender=get_header(headers, "From") or "Unknown sender",
        to=get_header(headers, "To"),
        date=get_header(headers, "Date"),
        labels=list(message.get("labelIds") or []),
        snippet=str(message.get("snippet") or ""),
    )
