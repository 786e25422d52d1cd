"""Tests for the Typer entry points and CLI helpers."""
import json
import logging

from typer.testing import CliRunner

from seekchat.cli.app import app
from seekchat.cli.providers import configure_logging
from seekchat.ui.config import LogLevel

runner = CliRunner()


class TestConfigCommand:
    """Tests for `seekchat config`."""

    def test_creates_and_shows_config(self, tmp_path):
        path = tmp_path / "config.json"
        result = runner.invoke(app, ["config", "--config", str(path)])

        assert result.exit_code == 0
        assert "Created configuration file" in result.output
        assert "truncate_length" in result.output
        assert json.loads(path.read_text(encoding="utf-8"))["max_tokens"] == 1000


class TestSummariesCommand:
    """Tests for `seekchat summaries`."""

    def test_lists_files(self, tmp_path, summary_dir):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"summary_dir": str(summary_dir)}), encoding="utf-8")
        (summary_dir / "summary_1_first.txt").write_text("", encoding="utf-8")

        result = runner.invoke(app, ["summaries", "--config", str(path)])

        assert result.exit_code == 0
        assert "summary_1_first.txt" in result.output

    def test_no_files(self, tmp_path, summary_dir):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"summary_dir": str(summary_dir)}), encoding="utf-8")

        result = runner.invoke(app, ["summaries", "--config", str(path)])
        assert "No summary files found" in result.output


class TestLogging:
    """Tests for log level handling."""

    def test_from_string(self):
        assert LogLevel.from_string("DEBUG") == logging.DEBUG
        assert LogLevel.from_string("nonsense") == logging.WARNING

    def test_sdk_loggers_stay_quiet(self, console):
        configure_logging("debug", console)
        try:
            assert logging.getLogger().level == logging.DEBUG
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            configure_logging("warning", console)
