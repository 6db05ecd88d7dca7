"""History lookups: reverse incremental search and prefix completion."""

from __future__ import annotations

import os
from collections.abc import Sequence


def find_match(history: Sequence[str], query: str, offset: int = 0) -> str | None:
    """Return the ``offset``-th entry containing ``query``.

    ``history`` is most-recent-first, so offset 0 is the newest match. An
    empty query matches nothing, and an offset past the last match finds
    nothing rather than wrapping around.
    """
    if not query or offset < 0:
        return None

    remaining = offset
    for entry in history:
        if query in entry:
            if remaining == 0:
                return entry
            remaining -= 1
    return None


def complete(history: Sequence[str], prefix: str) -> tuple[str, list[str]]:
    """Complete ``prefix`` against history entries that start with it.

    Returns the extended text (the longest common prefix of the candidates,
    or ``prefix`` unchanged) and the distinct candidates, newest first.
    """
    candidates = list(dict.fromkeys(entry for entry in history if entry.startswith(prefix)))
    if not candidates:
        return prefix, []
    return os.path.commonprefix(candidates), candidates
