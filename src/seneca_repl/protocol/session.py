"""Line-oriented console protocol over a FramedTransport.

Flow:
1. open() opens the transport and sends the greeting line ("hello")
2. The first frame is the handshake carrying the remote identity
3. Every later frame is the response to one sent line, in send order
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Protocol

from ..errors import ConnectError, HandshakeParseError
from .framing import ENCODING, FrameAssembler, normalize_response
from .handshake import RemoteIdentity, parse_handshake

if TYPE_CHECKING:
    from ..transport.base import FramedTransport

logger = logging.getLogger(__name__)

GREETING = "hello"


class SessionListener(Protocol):
    """Receives session events. All callbacks run on the event loop."""

    def on_connected(self, identity: RemoteIdentity) -> None: ...

    def on_frame(self, text: str) -> None: ...

    def on_closed(self) -> None: ...

    def on_error(self, error: Exception) -> None: ...


class ProtocolSession:
    """One connection to the remote REPL, from greeting to close.

    Usage:
        session = ProtocolSession(transport, listener=controller)
        await session.open()
        identity = await session.handshake()
        await session.send_line("role:math,cmd:sum")
        await session.wait_closed()
    """

    def __init__(
        self,
        transport: FramedTransport,
        listener: SessionListener | None = None,
        *,
        greeting: str = GREETING,
    ):
        self.transport = transport
        self._listener = listener
        self._greeting = greeting
        self._assembler = FrameAssembler()
        self._identity: RemoteIdentity | None = None
        self._handshake: asyncio.Future[RemoteIdentity] = (
            asyncio.get_running_loop().create_future()
        )
        self._closed = asyncio.Event()
        self._reader_task: asyncio.Task[None] | None = None

    @property
    def identity(self) -> RemoteIdentity | None:
        return self._identity

    @property
    def prompt(self) -> str:
        return self._identity.prompt if self._identity else "> "

    @property
    def is_open(self) -> bool:
        return self.transport.is_open and not self._closed.is_set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def open(self) -> None:
        """Open the transport and send the greeting.

        Raises:
            ConnectError: If the transport cannot be opened
        """
        await self.transport.open()
        self._reader_task = asyncio.create_task(self._read_loop())
        await self.send_line(self._greeting)

    async def handshake(self) -> RemoteIdentity:
        """Wait for the remote identity.

        Raises:
            HandshakeParseError: If the first frame is not a valid handshake
            ConnectError: If the connection closes before the handshake
        """
        return await asyncio.shield(self._handshake)

    async def send_line(self, text: str) -> None:
        """Send one line. Exactly one response frame is expected per line.

        Raises:
            ConnectError: If the transport is not open
        """
        if self._closed.is_set():
            raise ConnectError("Session closed")
        await self.transport.write((text + "\n").encode(ENCODING))

    async def close(self) -> None:
        """Close the transport and stop reading."""
        await self.transport.close()
        if self._reader_task:
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task
        self._mark_closed()

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def _read_loop(self) -> None:
        """Reassemble frames from transport chunks and dispatch them."""
        try:
            async for chunk in self.transport.chunks():
                for frame in self._assembler.feed(chunk):
                    if not self._handle_frame(frame):
                        return
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Read loop error: {e}")
            if self._handshake.done() and self._listener:
                self._listener.on_error(e)
            elif not self._handshake.done():
                self._handshake.set_exception(ConnectError(str(e) or type(e).__name__))
        finally:
            self._mark_closed()
            if self._assembler.pending:
                logger.debug("Discarding partial frame on close")
                self._assembler.reset()

    def _handle_frame(self, frame: str) -> bool:
        """Dispatch one frame. Returns False when reading should stop."""
        if self._identity is None:
            try:
                self._identity = parse_handshake(frame)
            except HandshakeParseError as e:
                logger.error(f"Handshake failed: {e.reason}")
                self._handshake.set_exception(e)
                return False

            logger.info(f"Handshake complete: {self._identity.id}")
            self._handshake.set_result(self._identity)
            if self._listener:
                self._listener.on_connected(self._identity)
            return True

        if self._listener:
            self._listener.on_frame(normalize_response(frame))
        return True

    def _mark_closed(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()

        if not self._handshake.done():
            self._handshake.set_exception(ConnectError("Connection closed before handshake"))
            # Retrieved by handshake() when someone is waiting; silence otherwise.
            self._handshake.exception()
        elif self._identity is not None and self._listener:
            self._listener.on_closed()
