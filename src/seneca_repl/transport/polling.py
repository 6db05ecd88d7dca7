"""Request/response polling transport (``http://``, ``https://``).

Each line written is one POST to the destination URL. The reply is turned
into a synthetic frame on the read side, so the session layer sees the same
NUL-terminated stream a socket would deliver.

Wire format:
- Request body:  {"id": "<session id>", "cmd": "<command>"}
- Reply body:    {"ok": true, "out": "..."} or {"ok": false, "err": "..."}

Requests are strictly serialized: a second write while one is outstanding
waits in a queue until the first reply's frame has been delivered.
Network failures become ``# ERROR: ...`` frames instead of closing the
transport, so one failed exchange leaves the session usable.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

import httpx
from pydantic import BaseModel, ValidationError

from ..config import ConsoleConfig
from ..destination import Destination
from ..protocol.framing import ENCODING, encode_frame
from .base import BaseFramedTransport

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "# ERROR: unknown"


class PollingRequest(BaseModel):
    """One command sent to the remote."""

    id: str
    cmd: str


class PollingReply(BaseModel):
    """The remote's answer to one command."""

    ok: bool = False
    out: str | None = None
    err: str | None = None

    def payload(self) -> str:
        """Frame text for this reply."""
        if self.ok:
            return self.out or ""
        return self.err or UNKNOWN_ERROR


class PollingTransport(BaseFramedTransport):
    """Transport over HTTP POST, one request per line."""

    def __init__(
        self,
        destination: Destination,
        config: ConsoleConfig | None = None,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(destination, config)
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None
        self._requests: asyncio.Queue[str | None] = asyncio.Queue()
        self._frames: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._dispatcher: asyncio.Task[None] | None = None

    @property
    def pending_requests(self) -> int:
        """Commands queued behind the outstanding one."""
        return self._requests.qsize()

    async def _do_open(self) -> None:
        # Nothing to dial: every exchange is its own request.
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.request_timeout, connect=self.config.connect_timeout),
            transport=self._http_transport,
        )
        self._dispatcher = asyncio.create_task(self._dispatch_loop())
        self._dispatcher.add_done_callback(self._on_dispatcher_done)

    async def _do_close(self) -> None:
        await self._requests.put(None)
        if self._dispatcher:
            self._dispatcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._dispatcher
            self._dispatcher = None

        if self._client:
            await self._client.aclose()
            self._client = None

        await self._frames.put(None)

    async def _do_write(self, data: bytes) -> None:
        command = data.decode(ENCODING, errors="replace").strip()
        await self._requests.put(command)

    async def _receive_chunks(self) -> AsyncIterator[bytes]:
        while True:
            frame = await self._frames.get()
            if frame is None:
                break
            yield frame

    async def _dispatch_loop(self) -> None:
        """Send queued commands one at a time."""
        while True:
            command = await self._requests.get()
            if command is None:
                break
            frame = await self._exchange(command)
            await self._frames.put(frame)

    def _on_dispatcher_done(self, task: asyncio.Task[None]) -> None:
        """End the read side if the dispatcher died, so the session sees a close."""
        if task.cancelled() or task.exception() is None:
            return
        logger.error(f"Request dispatcher failed: {task.exception()!r}")
        self._frames.put_nowait(None)

    async def _exchange(self, command: str) -> bytes:
        """POST one command and translate the reply into a frame."""
        if not self._client:
            return encode_frame("# ERROR: transport closed\n")

        body = PollingRequest(id=self.destination.session_id, cmd=command)
        try:
            response = await self._client.post(self.destination.url, json=body.model_dump())
            reply = PollingReply.model_validate_json(response.content)
        except httpx.HTTPError as e:
            logger.warning(f"Request failed for {command!r}: {e}")
            return encode_frame(f"# ERROR: {str(e) or type(e).__name__}\n")
        except ValidationError as e:
            logger.warning(f"Invalid reply for {command!r} (HTTP {response.status_code}): {e}")
            return encode_frame(f"# ERROR: invalid response (HTTP {response.status_code})\n")
        except Exception as e:
            logger.error(f"Exchange failed for {command!r}: {e!r}")
            return encode_frame(f"# ERROR: {str(e) or type(e).__name__}\n")

        return encode_frame(reply.payload())
