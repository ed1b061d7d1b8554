"""Tests for the command-line entry point."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from xwiki_survey.cli import build_parser, command_line_footer, main
from xwiki_survey.wiki_api import WikiAPIError


class TestBuildParser:
    """Tests for argument parsing."""

    def test_username_only(self):
        args = build_parser().parse_args(["Alice"])
        assert args.username == "Alice"
        assert args.category is None
        assert args.outfile is None

    def test_username_and_category(self):
        args = build_parser().parse_args(["Alice", "Sockpuppets of Alice", "--outfile", "r.txt"])
        assert args.category == "Sockpuppets of Alice"
        assert args.outfile == "r.txt"

    def test_username_required(self):
        """A missing username is an argument error."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_wikipage_and_lockedafter(self):
        args = build_parser().parse_args(
            ["Alice", "--wikipage", "User:Alice/Socks", "--lockedafter", "2021-08-21"]
        )
        assert args.wikipage == "User:Alice/Socks"
        assert args.lockedafter == datetime(2021, 8, 21, tzinfo=timezone.utc)

    def test_lockedafter_defaults_to_none(self):
        args = build_parser().parse_args(["Alice"])
        assert args.lockedafter is None
        assert args.wikipage is None

    def test_bad_lockedafter_is_usage_error(self):
        """An unparseable date is an argument error, not a traceback."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["Alice", "--lockedafter", "last tuesday"])


class TestCommandLineFooter:
    """Tests for the report footer."""

    def test_records_arguments(self):
        footer = command_line_footer(["Alice", "Sockpuppets of Alice"])
        assert footer == "Command line: <kbd>xwiki-survey Alice 'Sockpuppets of Alice'</kbd>"


class TestMain:
    """Tests for main."""

    @patch('xwiki_survey.cli.run')
    def test_runs_survey(self, mock_run, tmp_path, monkeypatch):
        """main should pass the arguments through to run."""
        monkeypatch.delenv("LOG_DIR", raising=False)
        mock_run.return_value = tmp_path / "spam.txt"

        main(["Alice", "Spammers", "--log-dir", str(tmp_path / "logs")])

        config, username, category, outfile = mock_run.call_args[0]
        assert (username, category, outfile) == ("Alice", "Spammers", None)
        assert config.log_dir == str(tmp_path / "logs")
        assert (tmp_path / "logs" / "Alice-xwiki_survey.log").exists()

        kwargs = mock_run.call_args[1]
        assert kwargs["wikipage"] is None
        assert kwargs["locked_after"] is None
        assert kwargs["footer"].startswith("Command line: <kbd>xwiki-survey Alice Spammers")

    @patch('xwiki_survey.cli.run')
    def test_passes_wikipage_and_lockedafter(self, mock_run, tmp_path):
        mock_run.return_value = tmp_path / "spam.txt"

        main([
            "Alice", "--wikipage", "User:Alice/Socks", "--lockedafter", "2021-08-21",
            "--log-dir", str(tmp_path / "logs"),
        ])

        kwargs = mock_run.call_args[1]
        assert kwargs["wikipage"] == "User:Alice/Socks"
        assert kwargs["locked_after"] == datetime(2021, 8, 21, tzinfo=timezone.utc)

    @patch('xwiki_survey.cli.run')
    def test_failures_propagate(self, mock_run, tmp_path):
        """Errors are logged and re-raised."""
        mock_run.side_effect = WikiAPIError("down")

        with pytest.raises(WikiAPIError):
            main(["Alice", "--log-dir", str(tmp_path / "logs")])

        content = (tmp_path / "logs" / "Alice-xwiki_survey.log").read_text()
        assert "Survey failed" in content
