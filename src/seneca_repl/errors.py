"""Error taxonomy for the console.

Every failure that reaches the user is printed as a single line starting
with a ``#`` marker (``# CONNECTION ERROR: ...``) so scripts wrapping the
console can grep for it.
"""

from __future__ import annotations


class ConsoleError(Exception):
    """Base class for console failures."""

    marker = "# ERROR"

    def user_message(self) -> str:
        """Line shown to the user for this failure."""
        return f"{self.marker}: {self}"


class InvalidDestination(ConsoleError):
    """The connection address could not be resolved."""

    marker = "# CONNECTION URL ERROR"


class ConnectError(ConsoleError):
    """The transport could not be opened, or closed before it was usable."""

    marker = "# CONNECTION ERROR"


class UnsupportedProtocol(ConsoleError):
    """No transport is known for the destination's scheme."""

    marker = "# CONNECTION ERROR"

    def __init__(self, scheme: str, url: str = ""):
        self.scheme = scheme
        self.url = url
        detail = f" for url: {url}" if url else ""
        super().__init__(f"unknown protocol: {scheme}{detail}")


class HandshakeParseError(ConsoleError):
    """The remote's first frame did not carry a usable identity."""

    marker = "# HANDSHAKE ERROR"

    def __init__(self, raw: str, reason: str):
        self.raw = raw
        self.reason = reason
        super().__init__(reason)

    def user_message(self) -> str:
        # The remote already reported its own failure; show it verbatim.
        if self.raw.startswith("# ERROR"):
            return self.raw
        return f"{self.marker}: {self.reason} hello: {self.raw}"
