"""
Unit tests for the pocketreader command-line interface.
"""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog
from click.testing import CliRunner

from pocketreader import __version__
from pocketreader.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI configures process-wide logging; put the previous setup back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def article_file(tmp_path: Path, article_html: str) -> Path:
    path = tmp_path / "story.html"
    path.write_text(article_html, encoding="utf-8")
    return path


class TestReadCommand:
    """Test cases for `pocketreader read`."""

    def test_html_output(self, runner, article_file):
        result = runner.invoke(cli, ["read", str(article_file)])
        assert result.exit_code == 0
        assert result.output.startswith('<div class="article-content">')

    def test_full_output(self, runner, article_file):
        result = runner.invoke(cli, ["read", str(article_file), "--full"])
        assert result.exit_code == 0
        assert result.output.startswith("<html")
        assert "sidebar" not in result.output

    def test_text_output(self, runner, article_file):
        result = runner.invoke(cli, ["read", str(article_file), "--format", "text"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Breaking News"
        assert lines[1] == ""
        assert "The city council voted" in lines[2]

    def test_json_output(self, runner, article_file):
        result = runner.invoke(
            cli,
            [
                "read",
                str(article_file),
                "--format",
                "json",
                "--no-headline",
                "--base-uri",
                "https://news.example.com/2024/story.html",
            ],
        )
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["title"] == "Breaking News"
        assert payload["headline_stripped"] is True
        assert payload["truncated"] is True
        assert payload["uri"] == "https://news.example.com/2024/story.html"
        assert "https://news.example.com/budget" in payload["content"]

    def test_title_hint(self, runner, article_file):
        result = runner.invoke(cli, ["read", str(article_file), "--format", "json", "--title-hint", "Given"])
        assert json.loads(result.output)["title"] == "Given"

    def test_reads_stdin(self, runner, article_html):
        result = runner.invoke(cli, ["read", "-", "--format", "text"], input=article_html.encode("utf-8"))
        assert result.exit_code == 0
        assert result.output.startswith("Breaking News")

    def test_extraction_error_exits_nonzero(self, runner, tmp_path, navigation_only_html):
        path = tmp_path / "nav.html"
        path.write_text(navigation_only_html, encoding="utf-8")
        result = runner.invoke(cli, ["read", str(path)])
        assert result.exit_code == 1
        assert '"error_type": "ExtractionError"' in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["read", str(tmp_path / "missing.html")])
        assert result.exit_code == 2


class TestGroupOptions:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config_file_is_used(self, runner, tmp_path, article_file):
        config_path = tmp_path / "pocketreader.yaml"
        config_path.write_text("extraction:\n  default_no_headline: true\n", encoding="utf-8")
        result = runner.invoke(cli, ["--config", str(config_path), "read", str(article_file), "--format", "json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["headline_stripped"] is True

    def test_log_level_is_applied(self, runner, article_file):
        with patch("pocketreader.cli.configure_logging") as configure:
            result = runner.invoke(cli, ["--log-level", "DEBUG", "read", str(article_file)])
        assert result.exit_code == 0
        monitoring = configure.call_args.args[0]
        assert monitoring.log_level == "DEBUG"
