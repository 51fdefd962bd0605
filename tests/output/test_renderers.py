"""Tests for operation-specific Rich renderers and output formatting."""

from __future__ import annotations

import json

from kgstore.output.formatters import OutputSettings, format_result
from kgstore.output.renderers import render_quiet, render_result
from kgstore.services.result import ServiceError, ServiceResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


# ── Error rendering ──────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("delete_graph", "NOT_FOUND", "Graph 'x' not found"))
        assert "ERROR" in output
        assert "delete_graph" in output
        assert "Graph 'x' not found" in output

    def test_verbose_shows_detail(self) -> None:
        result = _err("delete_graph", "NOT_FOUND", "Bad", graph_id="x")
        output = render_result(result, verbose=True)
        assert "detail" in output
        assert "graph_id" in output

    def test_detail_hidden_by_default(self) -> None:
        result = _err("delete_graph", "NOT_FOUND", "Bad", graph_id="x")
        assert "graph_id" not in render_result(result)

    def test_no_error_object(self) -> None:
        output = render_result(ServiceResult(ok=False, op="test"))
        assert "Unknown error" in output


# ── Graph rendering ──────────────────────────────────────────────────


class TestGraphRenderers:
    def test_graph_table(self) -> None:
        items = [
            {"id": "main", "name": "Main", "isDefault": True, "createdAt": "2025-01-01"},
            {"id": "abc", "name": "Draft", "isDefault": False, "createdAt": "2025-01-02"},
        ]
        output = render_result(_ok("list_graphs", items=items, count=2))
        assert "main" in output
        assert "Draft" in output
        assert "yes" in output
        assert output.endswith("2 graphs")

    def test_create_graph_with_counts(self) -> None:
        result = _ok(
            "create_graph",
            id="abc",
            name="Copy",
            sourceGraphId="main",
            counts={"domains": 3, "modules": 0},
        )
        output = render_result(result)
        assert output.startswith("OK")
        assert "sourceGraphId: main" in output
        assert "domains=3, modules=0" in output

    def test_snapshot_export_to_file(self) -> None:
        result = _ok("export_snapshot", id="main", output_file="out.json", counts={"modules": 1})
        output = render_result(result)
        assert "output_file: out.json" in output
        assert "modules=1" in output

    def test_init_without_migrations(self) -> None:
        result = _ok("init_store", path="data/graph.db", seeded=True, migrations=[], graph_count=1)
        output = render_result(result)
        assert "path: data/graph.db" in output
        assert "migrations: none" in output

    def test_init_lists_migrations(self) -> None:
        result = _ok("init_store", path="x", seeded=False, migrations=["scope:domains"])
        assert "migrations: scope:domains" in render_result(result)

    def test_generic_fallback(self) -> None:
        output = render_result(_ok("seed", id="main", seeded=True))
        assert "seed" in output
        assert "seeded: True" in output

    def test_verbose_meta(self) -> None:
        result = ServiceResult(ok=True, op="seed", data={}, meta={"elapsed_ms": 3})
        assert "elapsed_ms: 3" in render_result(result, verbose=True)


# ── Quiet and JSON modes ─────────────────────────────────────────────


class TestQuiet:
    def test_listing_prints_ids(self) -> None:
        items = [{"id": "main"}, {"id": "abc"}]
        assert render_quiet(_ok("list_graphs", items=items, count=2)) == "main\nabc"

    def test_create_prints_id(self) -> None:
        assert render_quiet(_ok("create_graph", id="abc", name="X")) == "abc"

    def test_other_ops(self) -> None:
        assert render_quiet(_ok("delete_graph", id="abc")) == "OK: delete_graph"

    def test_error(self) -> None:
        result = _err("delete_graph", "INVALID_OPERATION", "No")
        assert render_quiet(result) == "ERROR: delete_graph: No"


class TestFormatResult:
    def test_json_mode(self) -> None:
        output = format_result(_ok("seed", seeded=True), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["data"] == {"seeded": True}

    def test_json_wins_over_quiet(self) -> None:
        settings = OutputSettings(json_output=True, quiet=True)
        assert json.loads(format_result(_ok("seed"), settings=settings))["op"] == "seed"

    def test_default_is_human(self) -> None:
        assert format_result(_ok("seed", seeded=True)).startswith("OK")
