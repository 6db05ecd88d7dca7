"""Framed transport abstraction.

A FramedTransport is a duplex byte channel to the remote REPL. It knows
nothing about framing: it delivers raw byte chunks in arrival order and
writes raw bytes. Framing and the handshake live in ``protocol.session``.

Architecture:
- FramedTransport is the PROTOCOL (interface) every transport satisfies
- BaseFramedTransport handles state, locking and open-failure translation
- Subclasses implement the wire specifics (_do_open, _receive_chunks, ...)
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from enum import Enum
from typing import Protocol, runtime_checkable

from ..config import ConsoleConfig
from ..destination import Destination
from ..errors import ConnectError

logger = logging.getLogger(__name__)


class TransportState(str, Enum):
    """Channel state machine."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


@runtime_checkable
class FramedTransport(Protocol):
    """Protocol for duplex byte channels.

    All transports must implement:
    - open/close: Lifecycle management
    - chunks: Async iterator of received byte chunks, ends on close
    - write: Send raw bytes
    """

    @property
    def state(self) -> TransportState:
        """Current channel state."""
        ...

    @property
    def is_open(self) -> bool:
        """Check if the channel can carry data."""
        ...

    async def open(self) -> None:
        """Create the underlying channel.

        Raises:
            ConnectError: If the channel cannot be created
        """
        ...

    def chunks(self) -> AsyncIterator[bytes]:
        """Yield received byte chunks until the channel closes."""
        ...

    async def write(self, data: bytes) -> None:
        """Send bytes to the remote."""
        ...

    async def close(self) -> None:
        """Close the channel. Safe to call more than once."""
        ...


class BaseFramedTransport(ABC):
    """Base class for transports with common functionality.

    Provides:
    - State management
    - Serialized open/close
    - Translation of open failures into ConnectError
    """

    def __init__(self, destination: Destination, config: ConsoleConfig | None = None):
        self.destination = destination
        self.config = config or ConsoleConfig()
        self._state = TransportState.DISCONNECTED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> TransportState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == TransportState.CONNECTED

    async def open(self) -> None:
        async with self._lock:
            if self._state == TransportState.CONNECTED:
                return

            self._state = TransportState.CONNECTING
            try:
                await self._do_open()
            except ConnectError:
                self._state = TransportState.CLOSED
                raise
            except Exception as e:
                self._state = TransportState.CLOSED
                reason = str(e) or type(e).__name__
                raise ConnectError(f"{reason} ({self.destination.url})") from e

            self._state = TransportState.CONNECTED
            logger.info(f"{self.__class__.__name__} connected to {self.destination.url}")

    async def close(self) -> None:
        async with self._lock:
            if self._state in (TransportState.DISCONNECTED, TransportState.CLOSED):
                return

            self._state = TransportState.CLOSED
            await self._do_close()
            logger.info(f"{self.__class__.__name__} closed")

    async def write(self, data: bytes) -> None:
        if not self.is_open:
            raise ConnectError("Transport not connected")
        try:
            await self._do_write(data)
        except OSError as e:
            raise ConnectError(f"Write failed: {e}") from e

    async def chunks(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._receive_chunks():
                if chunk:
                    yield chunk
        finally:
            if self._state == TransportState.CONNECTED:
                # Remote hung up
                self._state = TransportState.CLOSED
                logger.info(f"{self.__class__.__name__} closed by remote")

    # Abstract methods for subclasses
    @abstractmethod
    async def _do_open(self) -> None:
        """Implementation-specific connection logic."""
        ...

    @abstractmethod
    async def _do_close(self) -> None:
        """Implementation-specific disconnection logic."""
        ...

    @abstractmethod
    async def _do_write(self, data: bytes) -> None:
        """Implementation-specific send logic."""
        ...

    @abstractmethod
    def _receive_chunks(self) -> AsyncIterator[bytes]:
        """Implementation-specific receive logic. Must be an async generator."""
        ...

    async def __aenter__(self) -> BaseFramedTransport:
        await self.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
