"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a StringIO-backed Rich Console; the caller takes
the text with ``get_output(console)``. Renderers are dispatched by
``result.op`` in :func:`render_result`; unknown ops fall through to a
generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from kgstore.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from kgstore.services.result import ServiceResult

    Renderer = Callable[[ServiceResult, Console], None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to text via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
        if verbose and result.meta:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: ids for listings, else one line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if isinstance(item, dict))
    if "id" in result.data and result.op == "create_graph":
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="kg.ok"), Text(f"  {result.op}", style="kg.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="kg.key")
    if key == "id" or key.endswith("Id"):
        v = Text(str(value), style="kg.id")
    elif key in ("path", "output_file"):
        v = Text(str(value), style="kg.path")
    elif key == "name":
        v = Text(str(value), style="kg.name")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, ensure_ascii=False, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _counts(console: Console, counts: dict[str, int]) -> None:
    line = ", ".join(f"{key}={value}" for key, value in counts.items())
    console.print(Text.assemble(Text("  counts: ", style="kg.key"), Text(line, style="kg.count")))


def _render_meta(console: Console, result: ServiceResult) -> None:
    console.print(Text("  meta:", style="dim"))
    for key, value in (result.meta or {}).items():
        console.print(f"    {key}: {value}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text("ERROR", style="kg.error"), Text(f"  {result.op}", style="kg.op"), Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Graph renderers ───────────────────────────────────────────────────


def _render_graph_table(result: ServiceResult, console: Console) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="kg.id", no_wrap=True)
    table.add_column("Name", style="kg.name")
    table.add_column("Default", style="kg.default")
    table.add_column("Created", style="dim")
    table.add_column("Updated", style="dim")
    for item in items:
        table.add_row(
            str(item.get("id", "")),
            str(item.get("name", "")),
            "yes" if item.get("isDefault") else "",
            str(item.get("createdAt", "")),
            str(item.get("updatedAt", "")),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} graphs")


def _render_mutation(result: ServiceResult, console: Console) -> None:
    """Render create_graph / delete_graph results."""
    _status_line(console, result)
    for key in ("id", "name", "sourceGraphId", "createdAt"):
        if key in result.data:
            _field(console, key, result.data[key])
    if "counts" in result.data:
        _counts(console, result.data["counts"])


# ── Snapshot renderers ───────────────────────────────────────────────


def _render_snapshot(result: ServiceResult, console: Console) -> None:
    """Render export_snapshot / import_snapshot results."""
    _status_line(console, result)
    for key in ("id", "output_file"):
        if key in result.data:
            _field(console, key, result.data[key])
    if "counts" in result.data:
        _counts(console, result.data["counts"])


def _render_init(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("path", "seeded", "graph_count"):
        if key in d:
            _field(console, key, d[key])
    migrations = d.get("migrations") or []
    _field(console, "migrations", ", ".join(migrations) if migrations else "none")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "list_graphs": _render_graph_table,
    "create_graph": _render_mutation,
    "delete_graph": _render_mutation,
    "export_snapshot": _render_snapshot,
    "import_snapshot": _render_snapshot,
    "init_store": _render_init,
    "seed": _render_generic,
}
