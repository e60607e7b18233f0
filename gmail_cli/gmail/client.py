"""Gmail REST client — thin typed API over an injected credential host."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any
from urllib.parse import urlencode

from gmail_cli.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_MS, DEFAULT_TOKEN_NAME
from gmail_cli.gmail.host import GMAIL_TOKEN_SPEC, TokenHost
from gmail_cli.gmail.types import FetchFailed, Fetched, FetchResult, LabelChange, Message

logger = logging.getLogger(__name__)

# Gmail system label ID
_UNREAD = "UNREAD"

_PERMISSIONS_FILE = "~/.config/opencode-lite/permissions.json"


class GmailError(Exception):
    """Base class for errors raised by the Gmail client."""


class CredentialMissing(GmailError):
    """Raised when the host has no credential under the requested name.

    ``remediation`` holds the multi-line setup instructions to show the user.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.remediation = _remediation_text(name)
        super().__init__("Gmail token not configured")


class ApiError(GmailError):
    """Raised when the Gmail API answers with a non-success status.

    ``data`` is the decoded error payload, or None when the body was not JSON.
    """

    def __init__(self, message: str, status: int, data: Any = None) -> None:
        self.status = status
        self.data = data
        super().__init__(message)


def _remediation_text(name: str) -> str:
    shape = {
        name: {
            "env": GMAIL_TOKEN_SPEC.env,
            "type": "oauth",
            "domains": list(GMAIL_TOKEN_SPEC.domains),
            "placement": {
                "type": "header",
                "name": GMAIL_TOKEN_SPEC.header,
                "format": GMAIL_TOKEN_SPEC.format,
            },
            "refreshEnv": "GMAIL_REFRESH_TOKEN",
            "refreshUrl": "https://oauth2.googleapis.com/token",
            "clientIdEnv": "GMAIL_CLIENT_ID",
            "clientSecretEnv": "GMAIL_CLIENT_SECRET",
        }
    }
    return "\n".join([
        "Gmail token not configured.",
        "",
        f"Add to {_PERMISSIONS_FILE}:",
        json.dumps(shape, indent=2),
        "",
        "Then set environment variables:",
        "  GMAIL_CLIENT_ID, GMAIL_CLIENT_SECRET, GMAIL_REFRESH_TOKEN",
    ])


def encode_query(params: Mapping[str, Any]) -> str:
    """Encode query parameters, dropping absent values.

    Sequences are comma-joined into a single value rather than repeated keys.
    Returns ``""`` when nothing is left, otherwise ``"?k=v&..."``.
    """
    present: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "" or value is False:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = ",".join(str(v) for v in value)
        present[key] = str(value)
    return f"?{urlencode(present)}" if present else ""


class GmailClient:
    """Gmail API client bound to one named credential on an injected host.

    The credential check runs once, at construction; every later call goes
    straight through ``host.authenticated_fetch``.

    Usage::

        client = GmailClient(host)
        listing = client.list_messages(q="is:unread", max_results=5)
        for result in client.get_messages([m["id"] for m in listing["messages"]]):
            ...
    """

    def __init__(
        self,
        host: TokenHost,
        *,
        token_name: str = DEFAULT_TOKEN_NAME,
        base_url: str = DEFAULT_BASE_URL,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        if not host.has_token(token_name):
            raise CredentialMissing(token_name)
        self._host = host
        self._token_name = token_name
        self._base_url = base_url
        self._timeout_ms = timeout_ms

    # ── Public API ─────────────────────────────────────────────────────────────

    def list_messages(
        self,
        *,
        q: str | None = None,
        max_results: int | None = None,
        page_token: str | None = None,
        label_ids: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        """List message ids (one page). Only the given parameters are sent."""
        query = encode_query({
            "q": q,
            "maxResults": max_results or None,
            "pageToken": page_token,
            "labelIds": list(label_ids) if label_ids else None,
        })
        return self.request(f"/users/me/messages{query}")

    def get_message(self, message_id: str, format: str = "full") -> Message:
        """Return one message in the given format."""
        return self.request(f"/users/me/messages/{message_id}{encode_query({'format': format})}")

    def get_messages(self, message_ids: Iterable[str], format: str = "full") -> list[FetchResult]:
        """Fetch messages one at a time, in order.

        A failing id becomes a ``FetchFailed`` entry in its slot; it never
        stops the rest of the batch.
        """
        results: list[FetchResult] = []
        for message_id in message_ids:
            try:
                results.append(Fetched(message_id, self.get_message(message_id, format)))
            except Exception as exc:  # noqa: BLE001
                logger.debug("Fetch failed for message %s: %s", message_id, exc)
                results.append(FetchFailed(message_id, str(exc)))
        return results

    def get_profile(self) -> dict[str, Any]:
        """Return the authenticated account's profile."""
        return self.request("/users/me/profile")

    def modify_message(self, message_id: str, change: LabelChange) -> Message:
        """Add and/or remove labels on a message."""
        return self.request(
            f"/users/me/messages/{message_id}/modify",
            method="POST",
            body=json.dumps(change.to_body()),
        )

    def mark_as_read(self, message_id: str) -> Message:
        return self.modify_message(message_id, LabelChange(remove_label_ids=[_UNREAD]))

    def mark_as_unread(self, message_id: str) -> Message:
        return self.modify_message(message_id, LabelChange(add_label_ids=[_UNREAD]))

    def trash_message(self, message_id: str) -> Message:
        """Move a message to the trash."""
        return self.request(f"/users/me/messages/{message_id}/trash", method="POST")

    # ── Transport ──────────────────────────────────────────────────────────────

    def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
        timeout: int | None = None,
    ) -> Any:
        """Call ``endpoint`` under the bound credential and return the parsed body.

        Raises ApiError on a non-success status.
        """
        url = f"{self._base_url}{endpoint}"
        logger.debug("Gmail → %s %s", method, endpoint)
        response = self._host.authenticated_fetch(
            self._token_name,
            url,
            method=method,
            headers={"Content-Type": "application/json", **(headers or {})},
            body=body,
            timeout=timeout or self._timeout_ms,
        )

        if not response.ok:
            try:
                data = response.json()
            except ValueError:
                data = None
            error = data.get("error") if isinstance(data, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            raise ApiError(message or f"HTTP {response.status}", response.status, data)

        return response.json()
