"""Console input state machine.

Two modes:
- COMMAND: each submitted line is sent to the remote
- SEARCH:  reverse incremental history search; nothing is sent

``transition(state, event)`` is pure: it returns the next state and a list
of effects for the controller to carry out. No terminal or network access
happens here.

Key bindings (see ``keys.KeyDecoder``):
    Ctrl-R   enter search / next match
    Ctrl-G   cancel search
    Tab      complete from history
    Up/Down  walk history
    Ctrl-C   quit
    Ctrl-D   quit on an empty line
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from .search import complete, find_match

EXIT_KEYWORDS = frozenset({"quit", "exit"})
DEFAULT_PROMPT = "> "


class Mode(str, Enum):
    COMMAND = "command"
    SEARCH = "search"


@dataclass(frozen=True)
class SearchCursor:
    query: str = ""
    offset: int = 0


@dataclass(frozen=True)
class ConsoleState:
    """Everything the input line needs to render and react.

    ``history`` is most-recent-first. ``history_index`` is -1 while editing
    a fresh line, otherwise the position of the recalled entry; ``draft``
    holds the fresh line while walking history.
    """

    mode: Mode = Mode.COMMAND
    prompt: str = DEFAULT_PROMPT
    buffer: str = ""
    history: tuple[str, ...] = ()
    cursor: SearchCursor = field(default_factory=SearchCursor)
    found: str | None = None
    connected: bool = False
    history_index: int = -1
    draft: str = ""

    def render(self) -> str:
        """Text of the input line."""
        if self.mode is Mode.SEARCH:
            return f"search: [{self.cursor.query}] {self.found or ''}"
        return self.prompt + self.buffer


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class KeyTyped:
    text: str


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class ClearLine:
    pass


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class SearchKey:
    """Enter search mode, or advance to the next match while searching."""


@dataclass(frozen=True)
class CancelSearch:
    pass


@dataclass(frozen=True)
class Complete:
    pass


@dataclass(frozen=True)
class HistoryPrevious:
    pass


@dataclass(frozen=True)
class HistoryNext:
    pass


@dataclass(frozen=True)
class Interrupt:
    pass


@dataclass(frozen=True)
class EndOfInput:
    """Ctrl-D, or ``eof=True`` when the input stream itself ended."""

    eof: bool = False


@dataclass(frozen=True)
class Connected:
    remote_id: str


@dataclass(frozen=True)
class Disconnected:
    pass


ConsoleEvent = (
    KeyTyped
    | Backspace
    | ClearLine
    | Submit
    | SearchKey
    | CancelSearch
    | Complete
    | HistoryPrevious
    | HistoryNext
    | Interrupt
    | EndOfInput
    | Connected
    | Disconnected
)


# =============================================================================
# Effects
# =============================================================================


@dataclass(frozen=True)
class Send:
    line: str


@dataclass(frozen=True)
class Persist:
    line: str


@dataclass(frozen=True)
class Reconnect:
    pass


@dataclass(frozen=True)
class Exit:
    code: int = 0


@dataclass(frozen=True)
class Commit:
    """Finish the displayed input line before output continues below it."""


@dataclass(frozen=True)
class ShowCompletions:
    candidates: tuple[str, ...]


Effect = Send | Persist | Reconnect | Exit | Commit | ShowCompletions


# =============================================================================
# Transitions
# =============================================================================


def transition(state: ConsoleState, event: ConsoleEvent) -> tuple[ConsoleState, list[Effect]]:
    """Apply one event."""
    if isinstance(event, Connected):
        return replace(state, connected=True, prompt=f"{event.remote_id}> "), []
    if isinstance(event, Disconnected):
        return replace(state, connected=False), []
    if isinstance(event, Interrupt):
        return state, [Commit(), Exit(0)]
    if isinstance(event, EndOfInput):
        if event.eof or (state.mode is Mode.COMMAND and not state.buffer):
            return state, [Commit(), Exit(0)]
        return state, []

    if state.mode is Mode.SEARCH:
        return _search_transition(state, event)
    return _command_transition(state, event)


def _command_transition(
    state: ConsoleState, event: ConsoleEvent
) -> tuple[ConsoleState, list[Effect]]:
    if isinstance(event, KeyTyped):
        return replace(state, buffer=state.buffer + event.text), []

    if isinstance(event, Backspace):
        return replace(state, buffer=state.buffer[:-1]), []

    if isinstance(event, ClearLine):
        return replace(state, buffer=""), []

    if isinstance(event, Submit):
        return _submit_command(state)

    if isinstance(event, SearchKey):
        return replace(state, mode=Mode.SEARCH, cursor=SearchCursor(), found=None), []

    if isinstance(event, Complete):
        if not state.buffer:
            return state, []
        text, candidates = complete(state.history, state.buffer)
        if text != state.buffer:
            return replace(state, buffer=text), []
        if len(candidates) > 1:
            return state, [ShowCompletions(tuple(candidates))]
        return state, []

    if isinstance(event, HistoryPrevious):
        index = state.history_index + 1
        if index >= len(state.history):
            return state, []
        draft = state.buffer if state.history_index == -1 else state.draft
        return replace(state, history_index=index, buffer=state.history[index], draft=draft), []

    if isinstance(event, HistoryNext):
        if state.history_index == -1:
            return state, []
        index = state.history_index - 1
        buffer = state.draft if index == -1 else state.history[index]
        return replace(state, history_index=index, buffer=buffer), []

    # CancelSearch outside search
    return state, []


def _submit_command(state: ConsoleState) -> tuple[ConsoleState, list[Effect]]:
    line = state.buffer
    cleared = replace(state, buffer="", history_index=-1, draft="")

    if line in EXIT_KEYWORDS:
        return cleared, [Commit(), Exit(0)]

    if line:
        cleared = replace(cleared, history=(line, *state.history))

    if not state.connected:
        # Dropped, not queued: the reconnect does not replay it.
        return cleared, [Commit(), Reconnect()]

    effects: list[Effect] = [Commit(), Persist(line), Send(line)]
    return cleared, effects


def _search_transition(
    state: ConsoleState, event: ConsoleEvent
) -> tuple[ConsoleState, list[Effect]]:
    if isinstance(event, KeyTyped):
        cursor = replace(state.cursor, query=state.cursor.query + event.text)
        return _rescan(state, cursor), []

    if isinstance(event, SearchKey):
        cursor = replace(state.cursor, offset=state.cursor.offset + 1)
        return _rescan(state, cursor), []

    if isinstance(event, Backspace):
        cursor = SearchCursor(query=state.cursor.query[:-1], offset=0)
        return _rescan(state, cursor), []

    if isinstance(event, Submit):
        return _leave_search(state, buffer=state.found or ""), []

    if isinstance(event, CancelSearch):
        return _leave_search(state, buffer=""), []

    return state, []


def _rescan(state: ConsoleState, cursor: SearchCursor) -> ConsoleState:
    found = find_match(state.history, cursor.query, cursor.offset)
    return replace(state, cursor=cursor, found=found)


def _leave_search(state: ConsoleState, *, buffer: str) -> ConsoleState:
    return replace(
        state,
        mode=Mode.COMMAND,
        cursor=SearchCursor(),
        found=None,
        buffer=buffer,
        history_index=-1,
        draft="",
    )
