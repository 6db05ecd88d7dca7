"""NUL-terminated frame reassembly.

Wire format: every response from the remote, the handshake included, is
arbitrary text followed by a single zero byte. There is no length prefix and
no escaping, so a zero byte inside a payload is malformed input.

    b"hel" + b"lo\\n\\x00"   -> "hello\\n"
    b"a\\x00b\\x00"          -> "a", "b"
"""

from __future__ import annotations

import re

TERMINATOR = b"\x00"
ENCODING = "utf-8"

_TRAILING_NEWLINES = re.compile(r"\n+$")


class FrameAssembler:
    """Accumulates byte chunks and yields complete frames.

    Chunks are joined before decoding so multi-byte characters split across
    reads survive intact.
    """

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    @property
    def pending(self) -> bool:
        """True while a partial frame is buffered."""
        return bool(self._chunks)

    def feed(self, chunk: bytes) -> list[str]:
        """Add a chunk and return the frames it completes, in order."""
        frames: list[str] = []
        while chunk:
            head, sep, chunk = chunk.partition(TERMINATOR)
            if not sep:
                self._chunks.append(head)
                break
            self._chunks.append(head)
            frames.append(b"".join(self._chunks).decode(ENCODING, errors="replace"))
            self._chunks.clear()
        return frames

    def reset(self) -> None:
        """Drop any partial frame."""
        self._chunks.clear()


def encode_frame(text: str) -> bytes:
    """Serialize text as one frame."""
    return text.encode(ENCODING) + TERMINATOR


def normalize_response(text: str) -> str:
    """Collapse trailing newlines to exactly one."""
    return _TRAILING_NEWLINES.sub("\n", text)
