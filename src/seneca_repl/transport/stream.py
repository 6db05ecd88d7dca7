"""Persistent byte-stream transport (``telnet://``).

Wire format: raw bytes in both directions over one TCP connection. The
client's lines end with ``\\n``; the remote's responses end with a zero byte.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from ..config import ConsoleConfig
from ..destination import Destination
from .base import BaseFramedTransport

logger = logging.getLogger(__name__)

READ_SIZE = 64 * 1024


class StreamTransport(BaseFramedTransport):
    """Transport over a plain TCP connection."""

    def __init__(self, destination: Destination, config: ConsoleConfig | None = None):
        super().__init__(destination, config)
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    async def _do_open(self) -> None:
        host, port = self.destination.host, self.destination.port
        self._reader, self._writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=self.config.connect_timeout,
        )
        logger.debug(f"TCP connection established to {host}:{port}")

    async def _do_close(self) -> None:
        if self._writer:
            self._writer.close()
            with contextlib.suppress(OSError):
                await self._writer.wait_closed()
            self._writer = None

    async def _do_write(self, data: bytes) -> None:
        if not self._writer:
            raise ConnectionError("Stream not connected")

        self._writer.write(data)
        await self._writer.drain()

    async def _receive_chunks(self) -> AsyncIterator[bytes]:
        if not self._reader:
            raise ConnectionError("Stream not connected")

        while True:
            data = await self._reader.read(READ_SIZE)
            if not data:
                # EOF - remote closed
                break
            yield data
