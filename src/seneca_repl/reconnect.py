"""Connect/retry loop.

State machine:

    idle -> connecting -> handshaking -> ready -> closed -> connecting ...
                                          \\-> closing -> closed   (user quit)

After an unexpected close the policy waits ``backoff.delay`` and tries
again, growing the delay by ``multiplier`` up to ``max_delay``. It retries
forever until the user quits. Failures before the first session was ever
established, and handshake failures at any time, are fatal.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from .errors import ConnectError
from .protocol.session import ProtocolSession

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle of the process's one logical connection."""

    IDLE = "idle"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    READY = "ready"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Backoff:
    """Multiplicative delay with a floor and a ceiling, no jitter."""

    min_delay: float = 0.111
    max_delay: float = 33.333
    multiplier: float = 1.1
    delay: float = field(default=0.0)

    def __post_init__(self) -> None:
        self.delay = min(max(self.delay, self.min_delay), self.max_delay)

    def next(self) -> float:
        """Return the delay to wait now and grow it for the next attempt."""
        current = self.delay
        self.delay = min(self.delay * self.multiplier, self.max_delay)
        return current

    def reset(self) -> None:
        self.delay = self.min_delay


SessionFactory = Callable[[], ProtocolSession]


class ReconnectPolicy:
    """Owns the ConnectionState, the Backoff and the live session."""

    def __init__(self, session_factory: SessionFactory, backoff: Backoff | None = None):
        self._session_factory = session_factory
        self.backoff = backoff or Backoff()
        self._state = ConnectionState.IDLE
        self._session: ProtocolSession | None = None
        self._established = False
        self._quit = False
        self._wakeup = asyncio.Event()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def session(self) -> ProtocolSession | None:
        """The live session, if one is open."""
        return self._session

    @property
    def established(self) -> bool:
        """True once any session completed its handshake."""
        return self._established

    @property
    def quit_requested(self) -> bool:
        return self._quit

    async def run(self) -> None:
        """Connect, and reconnect after every unexpected close.

        Returns after a user quit.

        Raises:
            ConnectError: If the very first connection fails
            HandshakeParseError: If any handshake is malformed
            UnsupportedProtocol: If the destination scheme has no transport
        """
        while not self._quit:
            await self._attempt()
            if self._quit:
                break
            delay = self.backoff.next()
            logger.info(f"Reconnecting in {delay:.3f}s")
            await self._pause(delay)

        self._set_state(ConnectionState.CLOSED)

    async def _attempt(self) -> None:
        """Run one session from dial to close."""
        self._set_state(ConnectionState.CONNECTING)
        session = self._session_factory()
        self._session = session
        try:
            await session.open()
            self._set_state(ConnectionState.HANDSHAKING)
            await session.handshake()
        except ConnectError as e:
            await self._discard(session)
            if not self._established and not self._quit:
                raise
            logger.info(f"Connection attempt failed: {e}")
            return
        except BaseException:
            await self._discard(session)
            raise

        self._established = True
        self.backoff.reset()
        self._set_state(ConnectionState.READY)

        await session.wait_closed()
        self._session = None
        if not self._quit:
            self._set_state(ConnectionState.CLOSED)
            logger.info("Connection closed unexpectedly")

    def request_reconnect(self) -> None:
        """Skip the rest of a pending backoff wait."""
        if self._state == ConnectionState.CLOSED and not self._quit:
            logger.debug("Reconnect requested")
            self._wakeup.set()

    async def quit(self) -> None:
        """Close the live session and stop retrying."""
        self._quit = True
        self._set_state(ConnectionState.CLOSING)
        self._wakeup.set()
        if self._session:
            await self._session.close()

    async def _pause(self, delay: float) -> None:
        self._wakeup.clear()
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._wakeup.wait(), timeout=delay)

    async def _discard(self, session: ProtocolSession) -> None:
        self._session = None
        self._set_state(ConnectionState.CLOSED)
        await session.close()

    def _set_state(self, state: ConnectionState) -> None:
        if state != self._state:
            logger.debug(f"Connection state: {self._state.value} -> {state.value}")
            self._state = state
