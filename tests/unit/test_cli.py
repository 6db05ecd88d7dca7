"""Unit tests for the command line entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from seneca_repl.cli import main
from seneca_repl.config import default_history_dir


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def mock_run_console():
    with patch("seneca_repl.cli.run_console", new_callable=AsyncMock) as mock:
        mock.return_value = 0
        yield mock


class TestMain:
    """Test argument handling."""

    def test_invalid_port(self, runner: CliRunner, mock_run_console: AsyncMock):
        result = runner.invoke(main, ["localhost", "not-a-port"])

        assert result.exit_code == 1
        assert result.output.startswith("# CONNECTION URL ERROR: ")
        mock_run_console.assert_not_called()

    def test_defaults(self, runner: CliRunner, mock_run_console: AsyncMock):
        result = runner.invoke(main, [], env={"SENECA_REPL_HISTORY_DIR": None})

        assert result.exit_code == 0
        destination, config = mock_run_console.call_args.args
        assert destination.url == "telnet://127.0.0.1:30303"
        assert config.history_enabled
        assert config.history_dir == default_history_dir()
        assert config.connect_timeout == 10.0

    def test_host_and_port(self, runner: CliRunner, mock_run_console: AsyncMock):
        runner.invoke(main, ["localhost", "40404"])

        destination, _ = mock_run_console.call_args.args
        assert destination.url == "telnet://localhost:40404"

    def test_url_argument(self, runner: CliRunner, mock_run_console: AsyncMock):
        runner.invoke(main, ["http://localhost:8000/repl?id=a"])

        destination, _ = mock_run_console.call_args.args
        assert destination.scheme == "http"
        assert destination.session_id == "a"

    def test_options(self, runner: CliRunner, mock_run_console: AsyncMock, tmp_path: Path):
        result = runner.invoke(
            main,
            [
                "--no-history",
                "--history-dir",
                str(tmp_path),
                "--connect-timeout",
                "2.5",
                "--request-timeout",
                "4",
            ],
        )

        assert result.exit_code == 0
        _, config = mock_run_console.call_args.args
        assert not config.history_enabled
        assert config.history_dir == tmp_path
        assert config.connect_timeout == 2.5
        assert config.request_timeout == 4.0

    def test_history_dir_from_environment(
        self, runner: CliRunner, mock_run_console: AsyncMock, tmp_path: Path
    ):
        runner.invoke(main, [], env={"SENECA_REPL_HISTORY_DIR": str(tmp_path)})

        _, config = mock_run_console.call_args.args
        assert config.history_dir == tmp_path

    def test_exit_status_propagated(self, runner: CliRunner, mock_run_console: AsyncMock):
        mock_run_console.return_value = 1

        result = runner.invoke(main, [])

        assert result.exit_code == 1

    def test_keyboard_interrupt_exits_zero(self, runner: CliRunner, mock_run_console: AsyncMock):
        mock_run_console.side_effect = KeyboardInterrupt

        result = runner.invoke(main, [])

        assert result.exit_code == 0

    def test_invalid_log_level(self, runner: CliRunner, mock_run_console: AsyncMock):
        result = runner.invoke(main, ["--log-level", "LOUD"])

        assert result.exit_code == 2
        mock_run_console.assert_not_called()

    def test_help(self, runner: CliRunner):
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "--no-history" in result.output
        assert "--history-dir" in result.output
