"""WebSocket transport plugin (``ws://``, ``wss://``).

Not one of the built-in transports: it is registered in the transport
registry the same way a third-party protocol plugin would be.

Wire format:
- Each write is sent as one text message
- Each received message is one byte chunk; frames still end with a zero byte
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from ..config import ConsoleConfig
from ..destination import Destination
from ..protocol.framing import ENCODING
from .base import BaseFramedTransport

if TYPE_CHECKING:
    from .registry import TransportRegistry

logger = logging.getLogger(__name__)

SCHEMES = ("ws", "wss")


class WebSocketTransport(BaseFramedTransport):
    """Transport over a WebSocket connection."""

    def __init__(self, destination: Destination, config: ConsoleConfig | None = None):
        super().__init__(destination, config)
        self._ws: ClientConnection | None = None

    async def _do_open(self) -> None:
        self._ws = await connect(
            self.destination.url,
            open_timeout=self.config.connect_timeout,
            ping_interval=30,
            ping_timeout=10,
        )

    async def _do_close(self) -> None:
        if self._ws:
            await self._ws.close()
            self._ws = None

    async def _do_write(self, data: bytes) -> None:
        if not self._ws:
            raise ConnectionError("WebSocket not connected")

        try:
            await self._ws.send(data.decode(ENCODING, errors="replace"))
        except ConnectionClosed as e:
            raise ConnectionError(f"WebSocket closed: {e}") from e

    async def _receive_chunks(self) -> AsyncIterator[bytes]:
        if not self._ws:
            raise ConnectionError("WebSocket not connected")

        try:
            async for message in self._ws:
                yield message.encode(ENCODING) if isinstance(message, str) else message
        except ConnectionClosed as e:
            logger.info(f"WebSocket closed: {e}")


def register(registry: TransportRegistry) -> None:
    """Register the WebSocket schemes."""
    for scheme in SCHEMES:
        registry.register(scheme, WebSocketTransport)
