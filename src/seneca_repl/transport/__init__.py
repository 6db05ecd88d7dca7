"""Transport abstraction layer.

Provides one duplex byte-channel interface over:
- telnet - Persistent TCP byte stream
- http/https - One POST per line, serialized
- ws/wss - WebSocket, registered as a protocol plugin

The session layer works with any FramedTransport without knowing which.
"""

from .base import BaseFramedTransport, FramedTransport, TransportState
from .mock import MockTransport, create_mock_transport
from .polling import PollingReply, PollingRequest, PollingTransport
from .registry import (
    BUILTIN_TRANSPORTS,
    TransportFactory,
    TransportRegistry,
    create_transport,
    transport_registry,
)
from .stream import StreamTransport
from .websocket import WebSocketTransport

__all__ = [
    # Base abstractions
    "FramedTransport",
    "BaseFramedTransport",
    "TransportState",
    # Implementations
    "StreamTransport",
    "PollingTransport",
    "PollingRequest",
    "PollingReply",
    "WebSocketTransport",
    "MockTransport",
    "create_mock_transport",
    # Lookup
    "TransportFactory",
    "TransportRegistry",
    "BUILTIN_TRANSPORTS",
    "create_transport",
    "transport_registry",
]
