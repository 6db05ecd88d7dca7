"""Pytest configuration and shared fixtures."""

import pytest

from seneca_repl.destination import Destination, resolve_destination


@pytest.fixture(scope="module")
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def http_destination() -> Destination:
    """Polling destination with an explicit session id."""
    return resolve_destination("http://repl.test/repl?id=w1")
