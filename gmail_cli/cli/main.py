"""CLI entry point for the Gmail command line client."""

import logging
import sys

import click
from dotenv import load_dotenv

from gmail_cli.cli.args import parse_args
from gmail_cli.cli.commands import run
from gmail_cli.config import Settings
from gmail_cli.gmail.host import default_host

logger = logging.getLogger(__name__)


# Options are parsed by parse_args, not click: unknown options and --help must
# reach the dispatcher untouched and in order.
@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_extra_args": True,
        "help_option_names": [],
    }
)
@click.argument("argv", nargs=-1, type=click.UNPROCESSED)
def cli(argv: tuple[str, ...]) -> None:
    """Gmail client — profile, list, unread, read, mark-read, mark-unread, trash."""
    load_dotenv()
    settings = Settings.from_env()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )
    host = default_host()
    try:
        code = run(parse_args(argv), host, settings)
    finally:
        host.close()
    sys.exit(code)
