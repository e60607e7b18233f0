"""Data types shared by the Gmail gateway, formatter and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Provider-shaped message object, passed through untouched
Message = dict[str, Any]


@dataclass(frozen=True)
class FormattedMessage:
    """Normalised view of a provider message.

    ``is_unread`` is derived from ``labels`` and is true iff ``UNREAD`` is one
    of them.
    """

    id: str
    thread_id: str
    subject: str
    sender: str
    to: str
    date: str
    labels: list[str] = field(default_factory=list)
    snippet: str = ""

    @property
    def is_unread(self) -> bool:
        return "UNREAD" in self.labels

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase shape used in JSON output."""
        return {
            "id": self.id,
            "threadId": self.thread_id,
            "subject": self.subject,
            "from": self.sender,
            "to": self.to,
            "date": self.date,
            "isUnread": self.is_unread,
            "labels": list(self.labels),
            "snippet": self.snippet,
        }


# ── Batch results ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Fetched:
    """A message that was fetched successfully."""

    id: str
    message: Message


@dataclass(frozen=True)
class FetchFailed:
    """A message id whose fetch raised; ``error`` is the error message."""

    id: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "error": self.error}


#: One entry of a sequential batch fetch, in input order.
FetchResult = Fetched | FetchFailed


@dataclass(frozen=True)
class ActionOutcome:
    """Outcome of a per-id mutation (mark-read, trash)."""

    id: str
    success: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "success": self.success}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class LabelChange:
    """Body of a modify request. Empty sides are left out of the request."""

    add_label_ids: list[str] | None = None
    remove_label_ids: list[str] | None = None

    def to_body(self) -> dict[str, list[str]]:
        body: dict[str, list[str]] = {}
        if self.add_label_ids:
            body["addLabelIds"] = list(self.add_label_ids)
        if self.remove_label_ids:
            body["removeLabelIds"] = list(self.remove_label_ids)
        return body
