"""Credential/transport host — the only place that ever sees a token value.

The Gmail client never performs OAuth or raw HTTP itself. It is handed a
``TokenHost`` that can say whether a named credential is configured and can
perform a request with that credential attached. Tests inject a mock; the
console script uses ``EnvTokenHost``.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)


# ── Host interface ─────────────────────────────────────────────────────────────


@runtime_checkable
class HostResponse(Protocol):
    """Minimal response surface the gateway relies on."""

    ok: bool
    status: int

    def json(self) -> Any:
        """Return the parsed response body. May raise on a non-JSON body."""
        ...


@runtime_checkable
class TokenHost(Protocol):
    """Interface for the external credential/transport host."""

    def has_token(self, name: str) -> bool:
        """Return True if the named credential is configured."""
        ...

    def authenticated_fetch(
        self,
        name: str,
        url: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: str | None = None,
        timeout: int | None = None,
    ) -> HostResponse:
        """Perform ``method url`` with the named credential attached.

        ``timeout`` is in milliseconds. Token injection and refresh are the
        host's responsibility.
        """
        ...


# ── Default host ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TokenSpec:
    """How a named credential is sourced and where it may be sent."""

    env: str
    domains: tuple[str, ...] = ()
    header: str = "Authorization"
    format: str = "Bearer {token}"

    def allows(self, url: str) -> bool:
        host = urlparse(url).hostname or ""
        return any(fnmatch.fnmatch(host, pattern) for pattern in self.domains)


GMAIL_TOKEN_SPEC = TokenSpec(
    env="GMAIL_ACCESS_TOKEN",
    domains=("gmail.googleapis.com", "*.googleapis.com"),
)


@dataclass(frozen=True)
class FetchResponse:
    """Plain response object returned by ``EnvTokenHost``."""

    status: int
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return json.loads(self.text)


@dataclass
class EnvTokenHost:
    """Host that reads bearer tokens from environment variables.

    Does not refresh tokens; an expired token surfaces as a 401 ``ApiError``
    from the gateway. Requests to hosts outside a token's ``domains`` are
    refused before anything is sent.
    """

    tokens: dict[str, TokenSpec] = field(
        default_factory=lambda: {"gmail": GMAIL_TOKEN_SPEC}
    )
    session: requests.Session = field(default_factory=requests.Session)

    def has_token(self, name: str) -> bool:
        spec = self.tokens.get(name)
        return spec is not None and bool(os.environ.get(spec.env))

    def authenticated_fetch(
        self,
        name: str,
        url: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: str | None = None,
        timeout: int | None = None,
    ) -> FetchResponse:
        spec = self.tokens.get(name)
        token = os.environ.get(spec.env, "") if spec is not None else ""
        if spec is None or not token:
            raise PermissionError(f"Token {name!r} is not configured")
        if not spec.allows(url):
            raise PermissionError(f"Token {name!r} may not be sent to {urlparse(url).hostname}")

        request_headers = dict(headers or {})
        request_headers[spec.header] = spec.format.format(token=token)
        logger.debug("host → %s %s", method, url)
        response = self.session.request(
            method,
            url,
            headers=request_headers,
            data=body,
            timeout=timeout / 1000 if timeout else None,
        )
        return FetchResponse(status=response.status_code, text=response.text)

    def close(self) -> None:
        self.session.close()


def default_host() -> EnvTokenHost:
    """Return the host used by the console script."""
    return EnvTokenHost()
