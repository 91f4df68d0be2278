"""Tests for execbeat CLI."""

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from execbeat import __version__
from execbeat.cli import app


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(write_config: Callable[..., Path]) -> Path:
    """Write a valid config running 'echo hello'."""
    return write_config(
        {
            "exec": {
                "command": "echo",
                "args": "hello",
                "schedule": "0 9 * * *",
                "timezone": "UTC",
            }
        }
    )


class TestHelp:
    """Tests for help output."""

    def test_help_shows_commands(self, runner: CliRunner) -> None:
        """Test help shows available commands."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "run" in result.output
        assert "once" in result.output
        assert "validate" in result.output
        assert "version" in result.output


class TestVersion:
    """Tests for version command."""

    def test_version(self, runner: CliRunner) -> None:
        """Test version command shows version."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestValidate:
    """Tests for validate command."""

    def test_valid_config(self, runner: CliRunner, config_file: Path) -> None:
        """Test validating a good config."""
        result = runner.invoke(app, ["validate", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "is valid" in result.output
        assert "Next runs:" in result.output
        assert "09:00:00+00:00" in result.output

    def test_no_preview(self, runner: CliRunner, config_file: Path) -> None:
        """Test that --next 0 skips the schedule preview."""
        result = runner.invoke(app, ["validate", "-c", str(config_file), "--next", "0"])

        assert result.exit_code == 0
        assert "Next runs:" not in result.output

    def test_missing_config(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test validating a config that does not exist."""
        result = runner.invoke(app, ["validate", "--config", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_config(
        self, runner: CliRunner, write_config: Callable[..., Path]
    ) -> None:
        """Test that validation errors are listed."""
        path = write_config({"exec": {"command": "df", "schedule": "@sometimes"}})

        result = runner.invoke(app, ["validate", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid config" in result.output
        assert "Unrecognized" in result.output

    def test_config_from_env(
        self, runner: CliRunner, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that EXECBEAT_CONFIG is used when --config is absent."""
        monkeypatch.setenv("EXECBEAT_CONFIG", str(config_file))

        result = runner.invoke(app, ["validate", "--next", "0"])

        assert result.exit_code == 0
        assert "is valid" in result.output


class TestOnce:
    """Tests for once command."""

    def test_table_output(self, runner: CliRunner, config_file: Path) -> None:
        """Test running the command once and showing its events."""
        result = runner.invoke(app, ["once", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "exited with 0" in result.output
        assert "1 event(s)" in result.output
        assert "hello" in result.output

    def test_json_output(self, runner: CliRunner, config_file: Path) -> None:
        """Test the JSON event output."""
        result = runner.invoke(app, ["once", "--config", str(config_file), "--json"])

        assert result.exit_code == 0
        assert '"exitCode": 0' in result.output
        assert '"stdout": "hello\\n"' in result.output

    def test_failing_command(
        self, runner: CliRunner, write_config: Callable[..., Path]
    ) -> None:
        """Test that a failing command is reported, not raised."""
        path = write_config({"exec": {"command": "missing-command-xyz"}})

        result = runner.invoke(app, ["once", "--config", str(path)])

        assert result.exit_code == 0
        assert "exited with 127" in result.output
        assert "could not start" in result.output

    def test_publish(
        self, runner: CliRunner, write_config: Callable[..., Path], tmp_path: Path
    ) -> None:
        """Test that --publish delivers the events to the configured output."""
        events_file = tmp_path / "events.jsonl"
        path = write_config(
            {
                "exec": {"command": "echo", "args": "a b", "split_lines": True},
                "output": {"type": "file", "path": str(events_file)},
            }
        )

        result = runner.invoke(app, ["once", "--config", str(path), "--publish"])

        assert result.exit_code == 0
        events = [json.loads(line) for line in events_file.read_text().splitlines()]
        assert [e["exec"]["stdout"] for e in events] == ["a b"]

    def test_publish_failure_closes_sink(
        self, runner: CliRunner, config_file: Path
    ) -> None:
        """Test that the sink is closed even when publishing fails."""
        sink = MagicMock()
        sink.publish.side_effect = RuntimeError("publisher broken")

        with patch("execbeat.cli.commands.once.create_sink", return_value=sink):
            result = runner.invoke(app, ["once", "--config", str(config_file), "--publish"])

        assert result.exit_code != 0
        assert isinstance(result.exception, RuntimeError)
        sink.close.assert_called_once()


class TestRun:
    """Tests for run command."""

    def test_run_starts_scheduler(self, runner: CliRunner, config_file: Path) -> None:
        """Test that run starts a blocking scheduler and closes the sink."""
        scheduler = MagicMock()
        sink = MagicMock()

        with (
            patch("execbeat.cli.commands.run.setup_logging"),
            patch("execbeat.cli.commands.run.setup_signal_handlers") as signals,
            patch("execbeat.cli.commands.run.create_sink", return_value=sink),
            patch(
                "execbeat.cli.commands.run.create_scheduler", return_value=scheduler
            ) as create,
        ):
            result = runner.invoke(app, ["run", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "Running" in result.output
        assert create.call_args.kwargs["scheduler_type"] == "blocking"
        signals.assert_called_once_with(scheduler)
        scheduler.start.assert_called_once()
        sink.close.assert_called_once()

    def test_run_keyboard_interrupt(self, runner: CliRunner, config_file: Path) -> None:
        """Test that Ctrl+C stops the scheduler."""
        scheduler = MagicMock()
        scheduler.start.side_effect = KeyboardInterrupt
        sink = MagicMock()

        with (
            patch("execbeat.cli.commands.run.setup_logging"),
            patch("execbeat.cli.commands.run.setup_signal_handlers"),
            patch("execbeat.cli.commands.run.create_sink", return_value=sink),
            patch("execbeat.cli.commands.run.create_scheduler", return_value=scheduler),
        ):
            result = runner.invoke(app, ["run", "--config", str(config_file)])

        assert result.exit_code == 0
        scheduler.stop.assert_called_once()
        sink.close.assert_called_once()

    def test_run_invalid_schedule(self, runner: CliRunner, config_file: Path) -> None:
        """Test that a scheduler that cannot be built exits with an error."""
        sink = MagicMock()

        with (
            patch("execbeat.cli.commands.run.setup_logging"),
            patch("execbeat.cli.commands.run.create_sink", return_value=sink),
            patch(
                "execbeat.cli.commands.run.create_scheduler",
                side_effect=ValueError("bad schedule"),
            ),
        ):
            result = runner.invoke(app, ["run", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Invalid schedule" in result.output
        sink.close.assert_called_once()

    def test_run_missing_config(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that run exits when the config is missing."""
        result = runner.invoke(app, ["run", "--config", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output
