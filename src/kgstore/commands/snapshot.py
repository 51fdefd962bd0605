"""Command group: snapshot export and import."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

from kgstore.commands._base import KgGroup

if TYPE_CHECKING:
    from kgstore.commands._context import AppContext

_SNAPSHOT_EXAMPLES = """\
  kgstore snapshot export main
  kgstore snapshot export main -o backups/main.json
  kgstore snapshot import main backups/main.json"""


@click.group(cls=KgGroup, examples=_SNAPSHOT_EXAMPLES)
def snapshot() -> None:
    """Read and replace whole graph snapshots."""


@snapshot.command(
    examples="""\
  kgstore snapshot export main > main.json
  kgstore snapshot export main --output backups/main.json"""
)
@click.argument("graph_id")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the snapshot to this file instead of stdout.",
)
@click.pass_obj
def export(app: AppContext, graph_id: str, output: Path | None) -> None:
    """Export the current snapshot of GRAPH_ID as JSON."""
    from kgstore.services.graphs import GraphService

    result = GraphService(app.store).export_snapshot(graph_id, output)
    if result.ok and output is None and not app.settings.json_output:
        click.echo(json.dumps(result.data["snapshot"], ensure_ascii=False, indent=2))
        return
    app.emit(result)


@snapshot.command("import", examples="  kgstore snapshot import main backups/main.json")
@click.argument("graph_id")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def import_cmd(app: AppContext, graph_id: str, source: Path) -> None:
    """Replace the snapshot of GRAPH_ID with the JSON document SOURCE."""
    from kgstore.services.graphs import GraphService

    app.emit(GraphService(app.store).import_snapshot(graph_id, source))
