"""Scheme-to-transport lookup.

The built-in transports form a closed set:
- telnet:       StreamTransport
- http, https:  PollingTransport

Every other scheme is an extension point resolved by name against the
factories registered in a TransportRegistry. A plugin registers itself at
import time:

    transport_registry.register("lambda", LambdaTransport)

A factory is called as ``factory(destination, config)`` and must return a
FramedTransport.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import ConsoleConfig
from ..destination import Destination
from ..errors import UnsupportedProtocol
from .base import FramedTransport
from .polling import PollingTransport
from .stream import StreamTransport

logger = logging.getLogger(__name__)

TransportFactory = Callable[[Destination, ConsoleConfig], FramedTransport]


class TransportRegistry:
    """Registry of protocol plugins keyed by URL scheme.

    Example:
        registry = TransportRegistry()
        registry.register("lambda", LambdaTransport)
        transport = create_transport(destination, config, registry)
    """

    def __init__(self) -> None:
        self._factories: dict[str, TransportFactory] = {}

    def register(self, scheme: str, factory: TransportFactory) -> None:
        """Register a transport factory for a scheme.

        Raises:
            ValueError: If the scheme is built in or already registered
        """
        scheme = scheme.lower()
        if scheme in BUILTIN_TRANSPORTS:
            raise ValueError(f"Scheme '{scheme}' is built in")
        if scheme in self._factories:
            raise ValueError(f"Scheme '{scheme}' already registered")
        self._factories[scheme] = factory
        logger.debug(f"Registered protocol plugin: {scheme}")

    def unregister(self, scheme: str) -> bool:
        """Remove a registration. Returns False if the scheme was unknown."""
        return self._factories.pop(scheme.lower(), None) is not None

    def get(self, scheme: str) -> TransportFactory | None:
        """Look up a registered factory."""
        return self._factories.get(scheme.lower())

    def list_schemes(self) -> list[str]:
        return sorted(self._factories)

    def resolve(self, scheme: str) -> TransportFactory | None:
        """Find a factory by name."""
        factory = self.get(scheme)
        if factory is None:
            logger.debug(f"No protocol plugin registered for {scheme}")
        return factory


BUILTIN_TRANSPORTS: dict[str, TransportFactory] = {
    "telnet": StreamTransport,
    "http": PollingTransport,
    "https": PollingTransport,
}


def _default_registry() -> TransportRegistry:
    from . import websocket

    registry = TransportRegistry()
    websocket.register(registry)
    return registry


transport_registry = _default_registry()


def create_transport(
    destination: Destination,
    config: ConsoleConfig | None = None,
    registry: TransportRegistry | None = None,
) -> FramedTransport:
    """Build the transport for a destination's scheme.

    Raises:
        UnsupportedProtocol: If no transport handles the scheme
    """
    config = config or ConsoleConfig()
    factory = BUILTIN_TRANSPORTS.get(destination.scheme)
    if factory is None:
        factory = (registry or transport_registry).resolve(destination.scheme)
    if factory is None:
        raise UnsupportedProtocol(destination.scheme, destination.url)
    return factory(destination, config)
