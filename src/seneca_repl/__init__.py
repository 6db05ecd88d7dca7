"""Seneca REPL console - interactive client for remote Seneca REPLs.

Connects over a raw TCP stream, HTTP polling or a registered protocol
plugin, performs the greeting handshake, and runs an interactive prompt
with history search and automatic reconnection.
"""

from .app import run_console
from .config import ConsoleConfig
from .destination import Destination, resolve_destination
from .errors import (
    ConnectError,
    ConsoleError,
    HandshakeParseError,
    InvalidDestination,
    UnsupportedProtocol,
)
from .history import HistoryStore
from .protocol import ProtocolSession, RemoteIdentity
from .reconnect import Backoff, ConnectionState, ReconnectPolicy
from .transport import FramedTransport, TransportRegistry, create_transport, transport_registry

__version__ = "0.1.0"

__all__ = [
    "run_console",
    "ConsoleConfig",
    "Destination",
    "resolve_destination",
    # Errors
    "ConsoleError",
    "ConnectError",
    "HandshakeParseError",
    "InvalidDestination",
    "UnsupportedProtocol",
    # Components
    "HistoryStore",
    "ProtocolSession",
    "RemoteIdentity",
    "Backoff",
    "ConnectionState",
    "ReconnectPolicy",
    "FramedTransport",
    "TransportRegistry",
    "create_transport",
    "transport_registry",
]
