"""Unit tests for ProtocolSession over the mock transport."""

from __future__ import annotations

import asyncio

import pytest

from seneca_repl.errors import ConnectError, HandshakeParseError
from seneca_repl.protocol.handshake import RemoteIdentity
from seneca_repl.protocol.session import ProtocolSession
from seneca_repl.transport import MockTransport, create_mock_transport


class RecordingListener:
    """SessionListener that keeps everything it is told."""

    def __init__(self):
        self.identities: list[RemoteIdentity] = []
        self.frames: asyncio.Queue[str] = asyncio.Queue()
        self.closed = 0
        self.errors: list[Exception] = []

    def on_connected(self, identity: RemoteIdentity) -> None:
        self.identities.append(identity)

    def on_frame(self, text: str) -> None:
        self.frames.put_nowait(text)

    def on_closed(self) -> None:
        self.closed += 1

    def on_error(self, error: Exception) -> None:
        self.errors.append(error)


async def next_frame(listener: RecordingListener) -> str:
    return await asyncio.wait_for(listener.frames.get(), timeout=1.0)


class TestHandshake:
    """Test greeting and identity exchange."""

    @pytest.mark.anyio
    async def test_greeting_sent_on_open(self):
        transport = create_mock_transport()
        session = ProtocolSession(transport)

        await session.open()

        assert transport.recorded_lines == ["hello"]
        await session.close()

    @pytest.mark.anyio
    async def test_handshake_identity(self):
        transport = create_mock_transport()
        listener = RecordingListener()
        session = ProtocolSession(transport, listener)

        await session.open()
        identity = await session.handshake()

        assert identity.id == "test"
        assert session.prompt == "test> "
        assert listener.identities == [identity]
        await session.close()

    @pytest.mark.anyio
    async def test_handshake_split_across_chunks(self):
        transport = MockTransport()
        transport.set_response("hello", '[{"id":"split"}]', chunks=4)
        session = ProtocolSession(transport)

        await session.open()

        assert (await session.handshake()).id == "split"
        await session.close()

    @pytest.mark.anyio
    async def test_custom_greeting(self):
        transport = MockTransport()
        transport.set_response("hi", '[{"id":"g"}]')
        session = ProtocolSession(transport, greeting="hi")

        await session.open()

        assert (await session.handshake()).id == "g"
        await session.close()

    @pytest.mark.anyio
    async def test_malformed_handshake(self):
        transport = MockTransport()
        transport.set_response("hello", "garbage")
        session = ProtocolSession(transport)

        await session.open()

        with pytest.raises(HandshakeParseError):
            await session.handshake()
        await session.close()

    @pytest.mark.anyio
    async def test_closed_before_handshake(self):
        """Remote hang-up before the first frame fails the handshake."""
        transport = MockTransport()
        session = ProtocolSession(transport)

        await session.open()
        transport.hang_up()

        with pytest.raises(ConnectError):
            await session.handshake()
        assert session.closed

    @pytest.mark.anyio
    async def test_open_failure(self):
        session = ProtocolSession(MockTransport(fail_open="refused"))

        with pytest.raises(ConnectError, match="refused"):
            await session.open()


class TestFrames:
    """Test response delivery after the handshake."""

    @pytest.mark.anyio
    async def test_response_delivered_normalized(self):
        transport = create_mock_transport()
        transport.set_response("1+1", "2\n\n\n", chunks=3)
        listener = RecordingListener()
        session = ProtocolSession(transport, listener)
        await session.open()
        await session.handshake()

        await session.send_line("1+1")

        assert await next_frame(listener) == "2\n"
        assert transport.recorded_lines == ["hello", "1+1"]
        await session.close()

    @pytest.mark.anyio
    async def test_frames_in_order(self):
        transport = create_mock_transport()
        listener = RecordingListener()
        session = ProtocolSession(transport, listener)
        await session.open()
        await session.handshake()

        transport.inject(b"first\x00sec")
        transport.inject(b"ond\x00")

        assert await next_frame(listener) == "first"
        assert await next_frame(listener) == "second"
        await session.close()

    @pytest.mark.anyio
    async def test_remote_close_notifies_listener(self):
        transport = create_mock_transport()
        listener = RecordingListener()
        session = ProtocolSession(transport, listener)
        await session.open()
        await session.handshake()

        transport.hang_up()
        await asyncio.wait_for(session.wait_closed(), timeout=1.0)

        assert listener.closed == 1
        assert not session.is_open

    @pytest.mark.anyio
    async def test_partial_frame_discarded_on_close(self):
        transport = create_mock_transport()
        listener = RecordingListener()
        session = ProtocolSession(transport, listener)
        await session.open()
        await session.handshake()

        transport.inject(b"never finished")
        transport.hang_up()
        await asyncio.wait_for(session.wait_closed(), timeout=1.0)

        assert listener.frames.empty()

    @pytest.mark.anyio
    async def test_send_after_close(self):
        transport = create_mock_transport()
        session = ProtocolSession(transport)
        await session.open()
        await session.handshake()
        await session.close()

        with pytest.raises(ConnectError):
            await session.send_line("1+1")

    @pytest.mark.anyio
    async def test_close_is_idempotent(self):
        transport = create_mock_transport()
        listener = RecordingListener()
        session = ProtocolSession(transport, listener)
        await session.open()
        await session.handshake()

        await session.close()
        await session.close()

        assert listener.closed == 1
