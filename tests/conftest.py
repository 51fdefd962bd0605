"""Shared pytest fixtures for kgstore tests."""

from __future__ import annotations

import copy
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from kgstore.infrastructure.store import GraphStore

SAMPLE_PAYLOAD: dict[str, Any] = {
    "version": 3,
    "exportedAt": "2025-02-01T10:00:00.000Z",
    "domains": [
        {
            "id": "root",
            "name": "Root",
            "description": "Top level",
            "isCatalogRoot": True,
            "children": [
                {"id": "child-a", "name": "Child A"},
                {
                    "id": "child-b",
                    "name": "Child B",
                    "experts": ["Ada"],
                    "children": [{"id": "leaf", "name": "Leaf", "description": "deep"}],
                },
            ],
        },
        {"id": "second-root", "name": "Second root"},
    ],
    "modules": [
        {"id": "module-b", "name": "B", "dependencies": ["module-a"]},
        {"id": "module-a", "name": "A", "dependencies": []},
    ],
    "artifacts": [{"id": "artifact-1", "name": "Report", "producedBy": "module-a"}],
    "initiatives": [{"id": "initiative-1", "name": "Rollout", "plannedModuleIds": ["module-b"]}],
    "experts": [{"id": "expert-1", "fullName": "Ada Lovelace"}],
    "layout": {
        "nodes": {
            "module-a": {"x": 10, "y": 20},
            "module-b": {"x": 1.5, "y": -3, "fx": 1.5, "fy": -3},
        }
    },
}


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """A small snapshot payload touching every collection; safe to mutate."""
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def image_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "graph.db"


@pytest.fixture
def store(image_path: Path) -> Generator[GraphStore]:
    """Unseeded store backed by an image file under ``tmp_path``."""
    s = GraphStore.initialize(image_path, seed=False)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def seeded_store(image_path: Path) -> Generator[GraphStore]:
    """Store whose default graph holds the reference dataset."""
    s = GraphStore.initialize(image_path, seed=True)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI commands from an empty temp directory with no config override.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")``; the CLI then
    keeps its image at ``tmp_path/data/graph.db``.
    """
    for name in ("KGSTORE_CONFIG", "KGSTORE_DB_PATH", "KGSTORE_ROOT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def _seeded_cwd(_isolated_cwd: None, cli_runner: CliRunner) -> None:
    """Like ``_isolated_cwd``, after ``kgstore init`` has seeded the image."""
    from kgstore.cli import cli

    result = cli_runner.invoke(cli, ["init"])
    assert result.exit_code == 0, result.output


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo ``configure_logging`` calls made by CLI invocations."""
    root = logging.getLogger()
    package = logging.getLogger("kgstore")
    saved = (list(root.handlers), root.level, package.level)
    yield
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
    package.setLevel(saved[2])
