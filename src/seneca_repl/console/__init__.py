"""Interactive console: state machine, key decoding, terminal and controller."""

from .controller import InteractiveController
from .search import complete, find_match
from .state import ConsoleState, Mode, SearchCursor, transition
from .terminal import Terminal

__all__ = [
    "InteractiveController",
    "Terminal",
    "ConsoleState",
    "Mode",
    "SearchCursor",
    "transition",
    "find_match",
    "complete",
]
