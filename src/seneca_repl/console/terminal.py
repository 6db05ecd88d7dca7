"""Terminal input and rendering.

On a tty the input is put in raw mode and read through ``loop.add_reader``
so every keystroke reaches the state machine; output newlines are written
as CRLF because raw mode turns off output post-processing. On a pipe the
same bytes arrive through ``connect_read_pipe`` and the input line is not
echoed, so piped output holds only responses.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import sys
from collections.abc import AsyncIterator
from typing import BinaryIO, TextIO

from .keys import KeyDecoder
from .state import ConsoleEvent, EndOfInput

if sys.platform != "win32":
    import termios
    import tty

logger = logging.getLogger(__name__)

READ_SIZE = 4096
CLEAR_LINE = "\r\x1b[K"


class Terminal:
    """Keystroke source and line renderer for the console."""

    def __init__(self, stdin: BinaryIO | None = None, output: TextIO | None = None):
        self._input = stdin or sys.stdin.buffer
        self._output = output or sys.stdout
        self._decoder = KeyDecoder()
        self._saved_attrs: list | None = None
        self._fd: int | None = None
        self._keys: asyncio.Queue[bytes | BaseException] | None = None
        self._reader: asyncio.StreamReader | None = None
        self._pipe: asyncio.ReadTransport | None = None
        self._started = False

    @property
    def interactive(self) -> bool:
        """True when the input line is drawn (output is a tty)."""
        try:
            return self._output.isatty()
        except ValueError:
            return False

    @property
    def raw(self) -> bool:
        return self._saved_attrs is not None

    async def start(self) -> None:
        """Begin reading input."""
        if self._started:
            return
        self._started = True

        loop = asyncio.get_running_loop()
        fd = self._input.fileno()
        self._fd = fd

        if os.isatty(fd):
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setraw(fd)
            self._keys = asyncio.Queue()
            loop.add_reader(fd, self._on_readable)
            logger.debug("Terminal input in raw mode")
        elif stat.S_ISREG(os.fstat(fd).st_mode):
            # Regular files cannot be watched; reads never block on them.
            logger.debug("Terminal input from file")
        else:
            self._reader = asyncio.StreamReader()
            protocol = asyncio.StreamReaderProtocol(self._reader)
            self._pipe, _ = await loop.connect_read_pipe(lambda: protocol, self._input)
            logger.debug("Terminal input from pipe")

    def stop(self) -> None:
        """Stop reading and restore the tty."""
        if not self._started:
            return
        self._started = False

        if self._keys is not None and self._fd is not None:
            asyncio.get_running_loop().remove_reader(self._fd)
            self._keys = None
        if self._saved_attrs is not None and self._fd is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None
        if self._pipe is not None:
            self._pipe.close()
            self._pipe = None

    async def events(self) -> AsyncIterator[ConsoleEvent]:
        """Yield console events until the input ends.

        Raises:
            OSError: If reading the input fails
        """
        while True:
            data = await self._read()
            if not data:
                yield EndOfInput(eof=True)
                return
            for event in self._decoder.feed(data):
                yield event

    async def _read(self) -> bytes:
        if self._keys is not None:
            item = await self._keys.get()
            if isinstance(item, BaseException):
                raise item
            return item
        if self._reader is not None:
            return await self._reader.read(READ_SIZE)
        await asyncio.sleep(0)
        return os.read(self._input.fileno(), READ_SIZE)

    def _on_readable(self) -> None:
        if self._keys is None or self._fd is None:
            return
        try:
            data = os.read(self._fd, READ_SIZE)
        except OSError as e:
            self._keys.put_nowait(e)
            return
        self._keys.put_nowait(data)

    # =========================================================================
    # Rendering
    # =========================================================================

    def redraw(self, line: str) -> None:
        """Replace the input line."""
        if self.interactive:
            self._write(CLEAR_LINE + line)

    def commit(self) -> None:
        """Leave the input line as is and move below it."""
        if self.interactive:
            self._write("\n")

    def print_block(self, text: str) -> None:
        """Print text on its own lines, replacing the input line."""
        if self.interactive:
            self._write(CLEAR_LINE)
        self._write(text + "\n")

    def _write(self, text: str) -> None:
        if self.raw and self.interactive:
            text = text.replace("\r\n", "\n").replace("\n", "\r\n")
        self._output.write(text)
        self._output.flush()
