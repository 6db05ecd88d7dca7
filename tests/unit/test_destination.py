"""Unit tests for destination resolution."""

import pytest
from pydantic import ValidationError

from seneca_repl.destination import resolve_destination
from seneca_repl.errors import InvalidDestination


class TestResolveDestination:
    """Test address forms accepted on the command line."""

    def test_defaults(self):
        """No arguments connects to the local telnet REPL."""
        dest = resolve_destination()

        assert dest.scheme == "telnet"
        assert dest.host == "127.0.0.1"
        assert dest.port == 30303
        assert dest.session_id == "web"
        assert dest.url == "telnet://127.0.0.1:30303"

    def test_host_and_port_arguments(self):
        """Legacy two-argument form."""
        dest = resolve_destination("localhost", "40404")

        assert dest.url == "telnet://localhost:40404"
        assert dest.host == "localhost"
        assert dest.port == 40404

    def test_scheme_implied(self):
        dest = resolve_destination("example.com:5000")

        assert dest.scheme == "telnet"
        assert dest.host == "example.com"
        assert dest.port == 5000

    def test_http_with_session_id(self):
        dest = resolve_destination("http://api.test/repl?id=w1")

        assert dest.scheme == "http"
        assert dest.host == "api.test"
        assert dest.session_id == "w1"
        assert dest.url == "http://api.test/repl?id=w1"

    def test_empty_session_id_uses_default(self):
        assert resolve_destination("http://api.test/repl?id=").session_id == "web"

    def test_missing_port_uses_default(self):
        assert resolve_destination("telnet://box").port == 30303

    def test_scheme_lowercased(self):
        assert resolve_destination("HTTPS://api.test/").scheme == "https"

    def test_invalid_port_argument(self):
        with pytest.raises(InvalidDestination):
            resolve_destination("localhost", "not-a-port")

    def test_port_out_of_range(self):
        with pytest.raises(InvalidDestination):
            resolve_destination("telnet://localhost:99999")

    def test_error_message_marker(self):
        with pytest.raises(InvalidDestination) as exc_info:
            resolve_destination("localhost", "x")

        assert exc_info.value.user_message().startswith("# CONNECTION URL ERROR: ")


class TestHistoryKey:
    """Test the file-name-safe address encoding."""

    def test_encodes_like_encode_uri_component(self):
        dest = resolve_destination()

        assert dest.history_key == "telnet%3A%2F%2F127.0.0.1%3A30303"

    def test_query_encoded(self):
        dest = resolve_destination("http://h/r?id=a")

        assert dest.history_key == "http%3A%2F%2Fh%2Fr%3Fid%3Da"

    def test_destination_is_frozen(self):
        dest = resolve_destination()

        with pytest.raises(ValidationError):
            dest.port = 1
