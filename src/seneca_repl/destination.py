"""Connection destination resolution.

Accepted forms (backwards compatible with ``seneca-repl localhost 30303``):

    seneca-repl                              # telnet://127.0.0.1:30303
    seneca-repl localhost 30303              # telnet://localhost:30303
    seneca-repl localhost:40404              # telnet://localhost:40404
    seneca-repl http://host:8000/repl?id=w1  # polling over HTTP, session w1
"""

from __future__ import annotations

from urllib.parse import parse_qs, quote, urlsplit

from pydantic import BaseModel, ConfigDict

from .errors import InvalidDestination

DEFAULT_SCHEME = "telnet"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 30303
DEFAULT_SESSION_ID = "web"

# Characters encodeURIComponent leaves alone, besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"


class Destination(BaseModel):
    """Where the console connects. Immutable for the process lifetime."""

    model_config = ConfigDict(frozen=True)

    scheme: str
    host: str
    port: int
    session_id: str
    url: str

    @property
    def history_key(self) -> str:
        """File-name-safe form of the address, keyed like other REPL clients."""
        return quote(self.url, safe=_URI_COMPONENT_SAFE)


def resolve_destination(address: str | None = None, port: str | None = None) -> Destination:
    """Build a Destination from the raw startup arguments.

    Raises:
        InvalidDestination: If the address or port cannot be parsed.
    """
    if not address:
        address = f"{DEFAULT_SCHEME}://{DEFAULT_HOST}:{DEFAULT_PORT}"
    elif port is not None:
        address = f"{DEFAULT_SCHEME}://{address}:{port}"
    elif "://" not in address:
        address = f"{DEFAULT_SCHEME}://{address}"

    try:
        parts = urlsplit(address)
        url_port = parts.port
    except ValueError as e:
        raise InvalidDestination(f"{e} {address}") from e

    scheme = parts.scheme.lower()
    if not scheme:
        raise InvalidDestination(f"missing scheme {address}")

    session_ids = parse_qs(parts.query).get("id", [])
    session_id = session_ids[0] if session_ids and session_ids[0] else DEFAULT_SESSION_ID

    return Destination(
        scheme=scheme,
        host=parts.hostname or DEFAULT_HOST,
        port=DEFAULT_PORT if url_port is None else url_port,
        session_id=session_id,
        url=address,
    )
