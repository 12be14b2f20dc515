# ==============================================================================
# Tests for CLI Help Commands
# ==============================================================================
"""
Tests that all CLI help commands generate the expected output.

Verifies that every command and subcommand in the sessioncollector CLI:
- Exits with code 0 when invoked with --help
- Contains the expected description text
- Lists the expected subcommands or options

These tests use the real app from sessioncollector.app to ensure the full
command tree is wired up and that Typer can introspect every command
signature.
"""

import pytest
from typer.testing import CliRunner

from sessioncollector.app import app

runner = CliRunner()


# ==============================================================================
# Root App
# ==============================================================================


class TestRootHelp:
    """Tests for the root `sessioncollector --help` output."""

    def test_exit_code(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0

    def test_description(self):
        result = runner.invoke(app, ["--help"])
        assert "Fingerprint session collector CLI" in result.output

    def test_lists_all_subcommands(self):
        result = runner.invoke(app, ["--help"])
        for cmd in ["config", "serve", "sessions", "status"]:
            assert cmd in result.output, f"Missing command: {cmd}"


# ==============================================================================
# Top-level Commands
# ==============================================================================


class TestServeHelp:
    """Tests for `sessioncollector serve --help`."""

    def test_options(self):
        result = runner.invoke(app, ["serve", "--help"])
        assert result.exit_code == 0
        assert "Start the HTTP collector" in result.output
        for option in ["--host", "--port", "--reload"]:
            assert option in result.output


class TestStatusHelp:
    """Tests for `sessioncollector status --help`."""

    def test_options(self):
        result = runner.invoke(app, ["status", "--help"])
        assert result.exit_code == 0
        assert "Show session store health" in result.output
        assert "--json" in result.output


# ==============================================================================
# Sub-apps
# ==============================================================================


class TestConfigHelp:
    """Tests for `sessioncollector config` help output."""

    def test_lists_subcommands(self):
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0
        assert "Configuration management" in result.output
        assert "show" in result.output

    def test_show_help(self):
        result = runner.invoke(app, ["config", "show", "--help"])
        assert result.exit_code == 0
        assert "--json" in result.output


class TestSessionsHelp:
    """Tests for `sessioncollector sessions` help output."""

    def test_lists_subcommands(self):
        result = runner.invoke(app, ["sessions", "--help"])
        assert result.exit_code == 0
        assert "Inspect stored sessions" in result.output
        for cmd in ["websites", "fingerprints", "list", "show"]:
            assert cmd in result.output, f"Missing command: {cmd}"

    @pytest.mark.parametrize(
        "command,expected",
        [
            ("websites", "List websites that have recorded sessions"),
            ("fingerprints", "List fingerprints with sessions under a website"),
            ("list", "List sessions for a fingerprint"),
            ("show", "Show one session document as JSON"),
        ],
    )
    def test_subcommand_help(self, command, expected):
        result = runner.invoke(app, ["sessions", command, "--help"])
        assert result.exit_code == 0
        assert expected in result.output
