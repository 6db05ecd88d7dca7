"""Handshake parsing.

After the greeting the remote answers with its identity as JSON wrapped in
one delimiter character on each side, e.g.::

    [{"id":"web-1","version":"3.2.0"}]

The wrapper is a structural quirk of Seneca REPL servers rather than a JSON
envelope: the first and last characters are stripped without inspection.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..errors import HandshakeParseError


class RemoteIdentity(BaseModel):
    """Identity announced by the remote in the handshake frame."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def prompt(self) -> str:
        return f"{self.id}> "


def unwrap_handshake(raw: str) -> str:
    """Trim, drop line breaks and strip the one-character wrapper."""
    text = raw.strip().replace("\r", "").replace("\n", "")
    return text[1:-1]


def parse_handshake(raw: str) -> RemoteIdentity:
    """Parse the first frame of a session.

    Raises:
        HandshakeParseError: If the frame does not hold an object with an ``id``.
    """
    payload = unwrap_handshake(raw)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise HandshakeParseError(raw, str(e)) from e

    if not isinstance(data, dict):
        raise HandshakeParseError(raw, f"expected an object, got {type(data).__name__}")

    try:
        return RemoteIdentity.model_validate(data)
    except ValidationError as e:
        raise HandshakeParseError(raw, f"invalid identity: {e.errors()[0]['msg']}") from e
