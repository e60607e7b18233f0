"""Argument parsing for the ``gmail`` command line.

The grammar is deliberately loose: the first bare token is the command,
later bare tokens are positionals, and any ``-x``/``--name`` token is an
option. An option takes the next token as its value unless that token also
starts with ``-``, so ``--max --summary`` yields ``max=True`` and a separate
``summary`` flag rather than ``max="--summary"``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

#: An option is either a string value or a bare flag (True).
OptionValue = str | bool

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class ParsedCommand:
    """Result of a single left-to-right pass over argv."""

    command: str | None = None
    positional: tuple[str, ...] = ()
    options: Mapping[str, OptionValue] = field(default_factory=lambda: MappingProxyType({}))


def parse_args(argv: Sequence[str]) -> ParsedCommand:
    """Split argv (without the program name) into command, positionals and options."""
    command: str | None = None
    positional: list[str] = []
    options: dict[str, OptionValue] = {}

    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg.startswith("-"):
            if arg.startswith("--"):
                key, sep, value = arg[2:].partition("=")
                if sep:
                    options[key] = value
                    i += 1
                    continue
            else:
                key = arg[1:]
            if i + 1 < len(argv) and not argv[i + 1].startswith("-"):
                options[key] = argv[i + 1]
                i += 1
            else:
                options[key] = True
        elif command is None:
            command = arg
        else:
            positional.append(arg)
        i += 1

    return ParsedCommand(command, tuple(positional), MappingProxyType(options))


# ── Typed options ──────────────────────────────────────────────────────────────


def _truthy(value: OptionValue | None) -> bool:
    return value is True or (isinstance(value, str) and value != "")


def _as_int(value: OptionValue | None) -> int | None:
    """Leading-integer parse; 0 and non-numeric values count as absent."""
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    if match is None:
        return None
    return int(match.group(1)) or None


def _as_str(value: OptionValue | None) -> str | None:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class CommandOptions:
    """The recognised options, resolved from a ParsedCommand.

    Synonyms, highest precedence first:
      - ``max_results``: ``--max``, ``--maxResults``
      - ``query``: ``-q``, ``--query``

    Unrecognised options are ignored.
    """

    summary: bool = False
    json: bool = False  # accepted for compatibility; JSON is the output whenever --summary is absent
    full: bool = False
    help: bool = False
    max_results: int | None = None
    query: str | None = None
    page_token: str | None = None
    label_ids: tuple[str, ...] = ()

    @classmethod
    def from_parsed(cls, parsed: ParsedCommand) -> CommandOptions:
        opts = parsed.options
        labels = _as_str(opts.get("label")) or ""
        return cls(
            summary=_truthy(opts.get("summary")),
            json=_truthy(opts.get("json")),
            full=_truthy(opts.get("full")),
            help=_truthy(opts.get("help")),
            max_results=_as_int(opts.get("max")) or _as_int(opts.get("maxResults")),
            query=_as_str(opts.get("q")) or _as_str(opts.get("query")),
            page_token=_as_str(opts.get("page-token")),
            label_ids=tuple(label for label in labels.split(",") if label),
        )
