"""Shared pytest fixtures."""

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from gmail_cli.config import DEFAULT_BASE_URL


def _response(data: Any, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status = status
    resp.json.return_value = data
    return resp


@pytest.fixture
def host() -> MagicMock:
    """A credential host with the gmail token configured and every call succeeding."""
    h = MagicMock()
    h.has_token.return_value = True
    h.authenticated_fetch.return_value = _response({})
    return h


@pytest.fixture
def routes(host: MagicMock) -> dict[tuple[str, str], Any]:
    """Route table for ``host.authenticated_fetch``, keyed by (method, path).

    Values are a response body, a ``(status, body)`` tuple, or an exception to
    raise. Unrouted requests answer 404.
    """
    table: dict[tuple[str, str], Any] = {}

    def fetch(name: str, url: str, *, method: str = "GET", **_: Any) -> MagicMock:
        path = url.removeprefix(DEFAULT_BASE_URL).split("?", 1)[0]
        reply = table.get((method, path))
        if reply is None:
            return _response({"error": {"code": 404, "message": "Requested entity was not found."}}, 404)
        if isinstance(reply, Exception):
            raise reply
        status, data = reply if isinstance(reply, tuple) else (200, reply)
        return _response(data, status)

    host.authenticated_fetch.side_effect = fetch
    return table


@pytest.fixture
def make_message() -> Callable[..., dict[str, Any]]:
    """Factory for provider-shaped Gmail messages."""

    def _make(
        message_id: str = "msg_001",
        *,
        subject: str | None = "Q2 budget review",
        sender: str | None = "Alice Smith <alice@example.com>",
        to: str | None = "bob@example.com",
        date: str | None = "Fri, 27 Feb 2026 09:00:00 +0000",
        labels: list[str] | None = None,
        snippet: str = "Please review the attached budget figures.",
    ) -> dict[str, Any]:
        headers = [
            {"name": name, "value": value}
            for name, value in (("Subject", subject), ("From", sender), ("To", to), ("Date", date))
            if value is not None
        ]
        return {
            "id": message_id,
            "threadId": f"thread_{message_id}",
            "labelIds": ["INBOX", "UNREAD"] if labels is None else labels,
            "snippet": snippet,
            "payload": {"headers": headers},
        }

    return _make
