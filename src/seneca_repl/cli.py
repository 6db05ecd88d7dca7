"""Seneca REPL console CLI.

Usage:
    seneca-repl                                  # telnet://127.0.0.1:30303
    seneca-repl localhost 30303                  # host and port
    seneca-repl localhost:40404                  # telnet:// is implied
    seneca-repl http://localhost:8000/repl?id=a  # HTTP polling, session "a"
    seneca-repl wss://example.com/repl           # WebSocket plugin

Inside the console:
    quit, exit   leave (status 0)
    Ctrl-R       search history; press again for the next match
    Ctrl-G       cancel search
    Tab          complete from history
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from .app import run_console
from .config import ConsoleConfig, default_history_dir
from .destination import resolve_destination
from .errors import InvalidDestination

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.command()
@click.argument("address", required=False)
@click.argument("port", required=False)
@click.option(
    "--history-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="SENECA_REPL_HISTORY_DIR",
    help="Directory for history files (default: ~/.seneca)",
)
@click.option("--no-history", is_flag=True, help="Do not read or write command history")
@click.option(
    "--connect-timeout",
    default=10.0,
    show_default=True,
    help="Seconds to wait when dialing",
)
@click.option(
    "--request-timeout",
    default=30.0,
    show_default=True,
    help="Seconds to wait for an HTTP reply",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="SENECA_REPL_LOG_LEVEL",
    show_default=True,
    help="Diagnostics written to stderr",
)
@click.version_option(package_name="seneca-repl")
def main(
    address: str | None,
    port: str | None,
    history_dir: Path | None,
    no_history: bool,
    connect_timeout: float,
    request_timeout: float,
    log_level: str,
) -> None:
    """Interactive console for a remote Seneca REPL."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        destination = resolve_destination(address, port)
    except InvalidDestination as e:
        click.echo(e.user_message())
        sys.exit(1)

    config = ConsoleConfig(
        connect_timeout=connect_timeout,
        request_timeout=request_timeout,
        history_enabled=not no_history,
        history_dir=history_dir or default_history_dir(),
    )

    try:
        code = asyncio.run(run_console(destination, config))
    except KeyboardInterrupt:
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
