"""Interactive controller.

Glues the pure state machine to the outside world:
- Terminal events in, rendered input line out
- Send effects to the live ProtocolSession
- Persist effects to the HistoryStore
- Reconnect / Exit effects to the ReconnectPolicy

It is also the SessionListener: frames are printed above the input line,
connects and closes update the state machine.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..errors import ConnectError, ConsoleError
from ..protocol.handshake import RemoteIdentity
from .state import (
    Commit,
    Connected,
    ConsoleEvent,
    ConsoleState,
    Disconnected,
    Effect,
    Exit,
    Persist,
    Reconnect,
    Send,
    ShowCompletions,
    transition,
)
from .terminal import Terminal

if TYPE_CHECKING:
    from ..history import HistoryStore
    from ..reconnect import ReconnectPolicy

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class InteractiveController:
    """Runs the console until the user quits or a fatal error occurs."""

    def __init__(
        self,
        terminal: Terminal,
        history_store: HistoryStore | None = None,
        history: Sequence[str] = (),
    ):
        self.terminal = terminal
        self._history_store = history_store
        self.state = ConsoleState(history=tuple(history))
        self._policy: ReconnectPolicy | None = None
        self._ready = asyncio.Event()
        self._exit_code: int | None = None

    @property
    def exiting(self) -> bool:
        return self._exit_code is not None

    # =========================================================================
    # Main loop
    # =========================================================================

    async def run(self, policy: ReconnectPolicy) -> int:
        """Connect, then process input until exit. Returns the exit status."""
        self._policy = policy
        policy_task = asyncio.create_task(policy.run())
        ready_task = asyncio.create_task(self._ready.wait())

        try:
            await asyncio.wait({policy_task, ready_task}, return_when=asyncio.FIRST_COMPLETED)
            if policy_task.done():
                return self._report_failure(policy_task)

            input_task = asyncio.create_task(self._input_loop())
            await asyncio.wait({policy_task, input_task}, return_when=asyncio.FIRST_COMPLETED)

            if input_task.done():
                code = input_task.result()
                await policy.quit()
                with contextlib.suppress(ConsoleError):
                    await policy_task
                return code

            input_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await input_task
            return self._report_failure(policy_task)
        finally:
            ready_task.cancel()
            if not policy_task.done():
                await policy.quit()
                policy_task.cancel()
                with contextlib.suppress(asyncio.CancelledError, ConsoleError):
                    await policy_task
            self.terminal.stop()

    async def _input_loop(self) -> int:
        try:
            await self.terminal.start()
            self.terminal.redraw(self.state.render())
            async for event in self.terminal.events():
                await self.handle(event)
                if self._exit_code is not None:
                    return self._exit_code
        except OSError as e:
            logger.error(f"Terminal input failed: {e}")
            self.terminal.print_block(f"# READLINE ERROR: {e}")
            return EXIT_FAILURE
        return EXIT_OK

    def _report_failure(self, policy_task: asyncio.Task[None]) -> int:
        """Turn the policy's outcome into an exit status."""
        error = policy_task.exception()
        if error is None:
            return EXIT_OK
        if isinstance(error, ConsoleError):
            self.terminal.print_block(error.user_message())
            return EXIT_FAILURE
        raise error

    # =========================================================================
    # Events and effects
    # =========================================================================

    async def handle(self, event: ConsoleEvent) -> None:
        """Feed one event through the state machine and apply its effects."""
        self.state, effects = transition(self.state, event)
        for effect in effects:
            await self._apply(effect)
            if self._exit_code is not None:
                return
        self.terminal.redraw(self.state.render())

    async def _apply(self, effect: Effect) -> None:
        if isinstance(effect, Commit):
            self.terminal.commit()
        elif isinstance(effect, Persist):
            if self._history_store:
                self._history_store.append(effect.line)
        elif isinstance(effect, Send):
            await self._send(effect.line)
        elif isinstance(effect, Reconnect):
            if self._policy:
                self._policy.request_reconnect()
        elif isinstance(effect, Exit):
            self._exit_code = effect.code
        elif isinstance(effect, ShowCompletions):
            self.terminal.print_block("  ".join(effect.candidates))

    async def _send(self, line: str) -> None:
        session = self._policy.session if self._policy else None
        if session is None:
            self._dispatch(Disconnected())
            return
        try:
            await session.send_line(line)
        except ConnectError as e:
            logger.warning(f"Send failed: {e}")
            self._dispatch(Disconnected())

    def _dispatch(self, event: ConsoleEvent) -> None:
        """Apply a connection event; these never produce effects."""
        self.state, _ = transition(self.state, event)

    # =========================================================================
    # SessionListener
    # =========================================================================

    def on_connected(self, identity: RemoteIdentity) -> None:
        self.terminal.print_block(f"Connected to Seneca: {identity.model_dump_json()}")
        self._dispatch(Connected(identity.id))
        self._ready.set()
        self.terminal.redraw(self.state.render())

    def on_frame(self, text: str) -> None:
        self.terminal.print_block(text)
        self.terminal.redraw(self.state.render())

    def on_closed(self) -> None:
        self._dispatch(Disconnected())
        if self.exiting or (self._policy and self._policy.quit_requested):
            return
        self.terminal.print_block("\n\nConnection closed.")
        self.terminal.redraw(self.state.render())

    def on_error(self, error: Exception) -> None:
        self.terminal.print_block(f"# CONNECTION ERROR: {error}")
