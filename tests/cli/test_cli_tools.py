"""Tests for ``mcpserve tools`` CLI command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from mcpserve.cli import main


class TestToolsList:
    def test_lists_builtin_tools(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list"])

        assert result.exit_code == 0
        assert "echo" in result.output
        assert "countdown" in result.output

    def test_json_output(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list", "--json"])

        assert result.exit_code == 0
        names = [tool["name"] for tool in json.loads(result.output)["tools"]]
        assert names == ["echo", "countdown", "fetch_json", "server_status"]

    def test_no_tools(self, tmp_path: Path) -> None:
        config = tmp_path / "server.yaml"
        config.write_text("builtin_tools: false\n")

        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list", "--config", str(config)])

        assert result.exit_code == 0
        assert "No tools registered" in result.output

    def test_bad_config(self, tmp_path: Path) -> None:
        config = tmp_path / "server.yaml"
        config.write_text("- just\n- a list\n")

        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list", "--config", str(config)])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
