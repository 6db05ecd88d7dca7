"""Console protocol layer.

Frames are NUL-terminated text; the first frame of a session is the
handshake carrying the remote identity, every later frame answers one line.
"""

from .framing import FrameAssembler, encode_frame, normalize_response
from .handshake import RemoteIdentity, parse_handshake, unwrap_handshake
from .session import GREETING, ProtocolSession, SessionListener

__all__ = [
    "FrameAssembler",
    "encode_frame",
    "normalize_response",
    "RemoteIdentity",
    "parse_handshake",
    "unwrap_handshake",
    "GREETING",
    "ProtocolSession",
    "SessionListener",
]
