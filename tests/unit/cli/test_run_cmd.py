"""Unit tests for the run command."""

from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from permguard.cli.main import app
from permguard.config.models import GuardConfig
from permguard.daemon.events import WatchError
from permguard.daemon.service import StartupError
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def mock_setup_logging() -> Iterator[MagicMock]:
    with patch("permguard.cli.commands.run.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture
def mock_run_daemon() -> Iterator[MagicMock]:
    with patch("permguard.cli.commands.run.run_daemon") as mock_run:
        yield mock_run


@pytest.mark.usefixtures("mock_setup_logging")
class TestRunCommand:
    """Tests for permguard run."""

    def test_starts_daemon_with_config(
        self,
        mock_run_daemon: MagicMock,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        write_config: Callable[[GuardConfig], Path],
    ) -> None:
        """The loaded config is passed to the daemon."""
        config = make_config(watch=[watch_root], mode="640")
        path = write_config(config)

        result = runner.invoke(app, ["run", "--config", str(path)])

        assert result.exit_code == 0
        mock_run_daemon.assert_called_once_with(config)

    def test_overrides(
        self,
        mock_run_daemon: MagicMock,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        write_config: Callable[[GuardConfig], Path],
    ) -> None:
        """--interval and --settle-ms override the config file."""
        path = write_config(make_config(watch=[watch_root]))

        result = runner.invoke(
            app, ["run", "--config", str(path), "--interval", "30", "--settle-ms", "500"]
        )

        assert result.exit_code == 0
        config = mock_run_daemon.call_args.args[0]
        assert config.check_interval_seconds == 30
        assert config.settle_ms == 500

    def test_invalid_interval_rejected(
        self,
        mock_run_daemon: MagicMock,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        write_config: Callable[[GuardConfig], Path],
    ) -> None:
        """A zero interval is rejected by option validation."""
        path = write_config(make_config(watch=[watch_root]))

        result = runner.invoke(app, ["run", "--config", str(path), "--interval", "0"])

        assert result.exit_code == 2
        mock_run_daemon.assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [
            StartupError("Directory /nope does not exist"),
            WatchError("Cannot start file watcher: inotify limit reached"),
        ],
    )
    def test_startup_failure_exits_1(
        self,
        mock_run_daemon: MagicMock,
        error: Exception,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        write_config: Callable[[GuardConfig], Path],
    ) -> None:
        """Startup and watcher failures exit with code 1."""
        mock_run_daemon.side_effect = error
        path = write_config(make_config(watch=[watch_root]))

        result = runner.invoke(app, ["run", "--config", str(path)])

        assert result.exit_code == 1
        assert str(error) in result.output

    def test_keyboard_interrupt_exits_0(
        self,
        mock_run_daemon: MagicMock,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        write_config: Callable[[GuardConfig], Path],
    ) -> None:
        """Ctrl-C shuts down cleanly."""
        mock_run_daemon.side_effect = KeyboardInterrupt
        path = write_config(make_config(watch=[watch_root]))

        result = runner.invoke(app, ["run", "--config", str(path)])

        assert result.exit_code == 0
        assert "shutting down" in result.stdout

    def test_creates_default_config_when_missing(
        self, mock_run_daemon: MagicMock, config_home: Path
    ) -> None:
        """Without a config file the defaults are written and used."""
        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert (config_home / "permguard" / "config.toml").exists()
        assert mock_run_daemon.call_args.args[0] == GuardConfig()

    def test_logging_flags(
        self,
        mock_setup_logging: MagicMock,
        mock_run_daemon: MagicMock,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        write_config: Callable[[GuardConfig], Path],
    ) -> None:
        """Global -q is forwarded to logging setup."""
        path = write_config(make_config(watch=[watch_root]))

        runner.invoke(app, ["-q", "run", "--config", str(path)])

        mock_setup_logging.assert_called_once_with(verbose=False, quiet=True)
