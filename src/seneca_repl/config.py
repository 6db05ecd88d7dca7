"""Console configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


def default_history_dir() -> Path:
    """Directory shared with other Seneca REPL clients."""
    return Path.home() / ".seneca"


@dataclass
class ConsoleConfig:
    """Settings for transports, reconnection and history.

    Filled from CLI options and environment variables by ``cli.main``;
    the defaults match the other Seneca REPL clients.
    """

    # Transport
    connect_timeout: float = 10.0
    request_timeout: float = 30.0
    greeting: str = "hello"

    # Reconnection (seconds)
    reconnect_delay: float = 0.111
    max_reconnect_delay: float = 33.333
    reconnect_backoff: float = 1.1

    # History
    history_enabled: bool = True
    history_dir: Path = field(default_factory=default_history_dir)
