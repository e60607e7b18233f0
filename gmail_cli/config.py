"""Runtime settings for the Gmail CLI, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "https://gmail.googleapis.com/gmail/v1"
DEFAULT_TOKEN_NAME = "gmail"
DEFAULT_TIMEOUT_MS = 15000

_FALSEY = {"", "0", "false", "no", "off"}


def _positive_int(raw: str, default: int) -> int:
    # 0 would turn into "no timeout" further down; treat it as unset.
    return int(raw) if raw.isdigit() and int(raw) > 0 else default


@dataclass(frozen=True)
class Settings:
    """Controls which credential the client asks for and where it sends requests.

    Token values never appear here; they belong to the host.
    """

    token_name: str = DEFAULT_TOKEN_NAME
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    debug: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Build Settings from environment variables."""
        timeout_raw = os.environ.get("GMAIL_TIMEOUT_MS", "").strip()
        return cls(
            token_name=os.environ.get("GMAIL_TOKEN_NAME", DEFAULT_TOKEN_NAME),
            base_url=os.environ.get("GMAIL_API_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            timeout_ms=_positive_int(timeout_raw, DEFAULT_TIMEOUT_MS),
            debug=os.environ.get("DEBUG", "").strip().lower() not in _FALSEY,
        )
