"""Console assembly.

Wires destination, transport, session, reconnect policy, history and
terminal together and runs until exit.
"""

from __future__ import annotations

import logging

from .config import ConsoleConfig
from .console.controller import InteractiveController
from .console.terminal import Terminal
from .destination import Destination
from .history import HistoryStore
from .protocol.session import ProtocolSession
from .reconnect import Backoff, ReconnectPolicy
from .transport.registry import TransportRegistry, create_transport

logger = logging.getLogger(__name__)


def build_history_store(destination: Destination, config: ConsoleConfig) -> HistoryStore:
    if not config.history_enabled:
        return HistoryStore.disabled()
    return HistoryStore.for_destination(destination, config.history_dir)


async def run_console(
    destination: Destination,
    config: ConsoleConfig | None = None,
    *,
    terminal: Terminal | None = None,
    registry: TransportRegistry | None = None,
) -> int:
    """Run the interactive console. Returns the process exit status."""
    config = config or ConsoleConfig()
    history_store = build_history_store(destination, config)
    controller = InteractiveController(
        terminal or Terminal(),
        history_store=history_store,
        history=history_store.load(),
    )

    def new_session() -> ProtocolSession:
        transport = create_transport(destination, config, registry)
        return ProtocolSession(transport, listener=controller, greeting=config.greeting)

    policy = ReconnectPolicy(
        new_session,
        Backoff(
            min_delay=config.reconnect_delay,
            max_delay=config.max_reconnect_delay,
            multiplier=config.reconnect_backoff,
        ),
    )

    logger.info(f"Connecting to {destination.url}")
    return await controller.run(policy)
