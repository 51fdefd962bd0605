"""Tests for the graphs command group."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from kgstore.cli import cli


def _create(cli_runner: CliRunner, *args: str) -> dict[str, Any]:
    result = cli_runner.invoke(cli, ["--json", "graphs", "create", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)["data"]


@pytest.mark.usefixtures("_isolated_cwd")
class TestGraphsList:
    def test_list_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["graphs", "list"])
        assert result.exit_code == 0
        assert "main" in result.output
        assert "1 graphs" in result.output

    def test_list_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "graphs", "list"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["op"] == "list_graphs"
        assert data["data"]["items"][0]["id"] == "main"

    def test_list_quiet_prints_ids(self, cli_runner: CliRunner) -> None:
        created = _create(cli_runner, "Other")
        result = cli_runner.invoke(cli, ["-q", "graphs", "list"])
        assert result.exit_code == 0
        assert result.output.split() == ["main", created["id"]]

    def test_creates_image_in_cwd(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        cli_runner.invoke(cli, ["graphs", "list"])
        assert (tmp_path / "data" / "graph.db").is_file()

    def test_db_flag(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        target = tmp_path / "custom.db"
        result = cli_runner.invoke(cli, ["--db", str(target), "graphs", "list"])
        assert result.exit_code == 0
        assert target.is_file()


@pytest.mark.usefixtures("_isolated_cwd")
class TestGraphsCreate:
    def test_create_empty(self, cli_runner: CliRunner) -> None:
        data = _create(cli_runner, "Scratch")
        assert data["name"] == "Scratch"
        assert data["isDefault"] is False

    def test_create_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["graphs", "create", "Scratch"])
        assert result.exit_code == 0
        assert "create_graph" in result.output
        assert "Scratch" in result.output

    def test_create_quiet_prints_id(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "graphs", "create", "Scratch"])
        assert result.exit_code == 0
        listed = cli_runner.invoke(cli, ["-q", "graphs", "list"])
        assert result.output.strip() in listed.output.split()

    def test_blank_name(self, cli_runner: CliRunner) -> None:
        data = _create(cli_runner, "")
        assert data["name"].startswith("Graph ")

    @pytest.mark.usefixtures("_seeded_cwd")
    def test_copy_without_modules(self, cli_runner: CliRunner) -> None:
        data = _create(cli_runner, "Copy", "--from", "main", "--no-modules")
        assert data["sourceGraphId"] == "main"
        assert data["counts"]["modules"] == 0
        assert data["counts"]["domains"] > 0
        assert data["counts"]["experts"] > 0

    def test_copy_from_unknown_graph(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["graphs", "create", "Copy", "--from", "missing"])
        assert result.exit_code == 1
        assert "not found" in result.output


@pytest.mark.usefixtures("_isolated_cwd")
class TestGraphsDelete:
    def test_delete(self, cli_runner: CliRunner) -> None:
        created = _create(cli_runner, "Doomed")
        result = cli_runner.invoke(cli, ["--json", "graphs", "delete", created["id"]])
        assert result.exit_code == 0
        listed = json.loads(cli_runner.invoke(cli, ["--json", "graphs", "list"]).output)
        assert [item["id"] for item in listed["data"]["items"]] == ["main"]

    def test_delete_default_fails(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "graphs", "delete", "main"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["ok"] is False
        assert data["error"]["code"] == "INVALID_OPERATION"

    def test_delete_unknown(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["graphs", "delete", "missing"])
        assert result.exit_code == 1
        assert "ERROR" in result.output
