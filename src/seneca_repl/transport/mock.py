"""In-memory transport for testing.

Records every write and answers from canned responses. No actual I/O.

Usage:
    transport = MockTransport()
    transport.set_response("hello", '[{"id":"test"}]')
    transport.set_response("1+1", "2\\n")

    session = ProtocolSession(transport)
    await session.open()
    assert (await session.handshake()).id == "test"
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from ..config import ConsoleConfig
from ..destination import Destination, resolve_destination
from ..errors import ConnectError
from ..protocol.framing import ENCODING, encode_frame
from .base import BaseFramedTransport


class MockTransport(BaseFramedTransport):
    """Transport double that replays canned frames."""

    def __init__(
        self,
        destination: Destination | None = None,
        config: ConsoleConfig | None = None,
        *,
        fail_open: str | None = None,
    ):
        super().__init__(destination or resolve_destination("mock://test"), config)
        self._fail_open = fail_open
        self._responses: dict[str, list[bytes]] = {}
        self._recorded: list[bytes] = []
        self._incoming: asyncio.Queue[bytes | None] = asyncio.Queue()

    @property
    def recorded_writes(self) -> list[bytes]:
        return self._recorded.copy()

    @property
    def recorded_lines(self) -> list[str]:
        """Writes decoded, without their trailing newline."""
        return [data.decode(ENCODING).removesuffix("\n") for data in self._recorded]

    def set_response(self, line: str, text: str, *, chunks: int = 1) -> None:
        """Answer ``line`` with one frame, optionally split into several chunks."""
        frame = encode_frame(text)
        size = max(1, -(-len(frame) // chunks))
        self._responses[line] = [frame[i : i + size] for i in range(0, len(frame), size)]

    def inject(self, chunk: bytes) -> None:
        """Deliver raw bytes as if the remote sent them."""
        self._incoming.put_nowait(chunk)

    def hang_up(self) -> None:
        """Simulate the remote closing the connection."""
        self._incoming.put_nowait(None)

    async def _do_open(self) -> None:
        if self._fail_open:
            raise ConnectError(self._fail_open)

    async def _do_close(self) -> None:
        self._incoming.put_nowait(None)

    async def _do_write(self, data: bytes) -> None:
        self._recorded.append(data)
        line = data.decode(ENCODING).removesuffix("\n")
        for chunk in self._responses.get(line, []):
            self._incoming.put_nowait(chunk)

    async def _receive_chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._incoming.get()
            if chunk is None:
                break
            yield chunk


def create_mock_transport(**responses: str) -> MockTransport:
    """Mock transport that completes the handshake as ``test``."""
    transport = MockTransport()
    transport.set_response("hello", '[{"id":"test"}]')
    for line, text in responses.items():
        transport.set_response(line, text)
    return transport
