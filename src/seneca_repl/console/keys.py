"""Raw terminal bytes to console events."""

from __future__ import annotations

import codecs

from .state import (
    Backspace,
    CancelSearch,
    ClearLine,
    Complete,
    ConsoleEvent,
    EndOfInput,
    HistoryNext,
    HistoryPrevious,
    Interrupt,
    KeyTyped,
    SearchKey,
    Submit,
)

ESC = "\x1b"

CONTROL_KEYS: dict[str, type[ConsoleEvent]] = {
    "\x03": Interrupt,  # Ctrl-C
    "\x04": EndOfInput,  # Ctrl-D
    "\x07": CancelSearch,  # Ctrl-G
    "\x08": Backspace,  # Ctrl-H
    "\x09": Complete,  # Tab
    "\x12": SearchKey,  # Ctrl-R
    "\x15": ClearLine,  # Ctrl-U
    "\x7f": Backspace,  # DEL
}

ESCAPE_KEYS: dict[str, type[ConsoleEvent]] = {
    "A": HistoryPrevious,
    "B": HistoryNext,
}


class KeyDecoder:
    """Incremental decoder for keystrokes read from a tty or a pipe.

    Handles UTF-8 sequences and escape sequences split across reads, and
    treats CR, LF and CRLF alike as one Submit.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._escape = ""
        self._after_cr = False

    def feed(self, data: bytes) -> list[ConsoleEvent]:
        events: list[ConsoleEvent] = []
        text: list[str] = []

        def flush_text() -> None:
            if text:
                events.append(KeyTyped("".join(text)))
                text.clear()

        for char in self._decoder.decode(data):
            if self._escape == ESC and char not in "[O":
                # Lone ESC; the key after it is ordinary input
                self._escape = ""
            elif self._escape:
                self._escape += char
                event = self._finish_escape()
                if event is not None:
                    flush_text()
                    events.append(event)
                continue

            after_cr, self._after_cr = self._after_cr, False
            if char == "\n" and after_cr:
                continue

            if char in ("\r", "\n"):
                flush_text()
                events.append(Submit())
                self._after_cr = char == "\r"
            elif char == ESC:
                self._escape = ESC
            elif char in CONTROL_KEYS:
                flush_text()
                events.append(CONTROL_KEYS[char]())
            elif char.isprintable():
                text.append(char)

        flush_text()
        return events

    def _finish_escape(self) -> ConsoleEvent | None:
        """Consume an escape sequence once complete; unknown ones are dropped."""
        seq = self._escape
        if len(seq) == 2:
            return None

        final = seq[-1]
        if "\x40" <= final <= "\x7e":
            self._escape = ""
            if len(seq) == 3:
                event_type = ESCAPE_KEYS.get(final)
                return event_type() if event_type else None
        return None
