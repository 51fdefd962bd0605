"""Command group: graph registry (list, create, delete)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kgstore.commands._base import KgGroup

if TYPE_CHECKING:
    from kgstore.commands._context import AppContext

_GRAPHS_EXAMPLES = """\
  kgstore graphs list
  kgstore graphs create "Q3 planning"
  kgstore graphs create "Modules only" --from main --no-domains --no-initiatives
  kgstore graphs delete 1f0c6c1e-6a55-4a8e-9d1e-2f3b6f1d8c11"""


@click.group(cls=KgGroup, examples=_GRAPHS_EXAMPLES)
def graphs() -> None:
    """Manage named graphs."""


@graphs.command("list", examples="  kgstore graphs list\n  kgstore --json graphs list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List graphs, the default graph first."""
    from kgstore.services.graphs import GraphService

    app.emit(GraphService(app.store).list_graphs())


@graphs.command(
    examples="""\
  kgstore graphs create "Scratch"
  kgstore graphs create "" --from main
  kgstore graphs create "No layout" --from main --no-modules"""
)
@click.argument("name")
@click.option("--from", "source", default=None, metavar="GRAPH_ID", help="Copy from this graph.")
@click.option("--no-domains", is_flag=True, help="Leave the domain tree out of the copy.")
@click.option("--no-modules", is_flag=True, help="Leave modules and the layout out of the copy.")
@click.option("--no-artifacts", is_flag=True, help="Leave artifacts out of the copy.")
@click.option("--no-initiatives", is_flag=True, help="Leave initiatives out of the copy.")
@click.pass_obj
def create(
    app: AppContext,
    name: str,
    source: str | None,
    no_domains: bool,
    no_modules: bool,
    no_artifacts: bool,
    no_initiatives: bool,
) -> None:
    """Create a graph, empty or copied from another one.

    A blank NAME becomes "Graph YYYY-MM-DD". Experts are always copied.
    """
    from kgstore.services.graphs import GraphService

    app.emit(
        GraphService(app.store).create_graph(
            name,
            source_graph_id=source,
            include_domains=not no_domains,
            include_modules=not no_modules,
            include_artifacts=not no_artifacts,
            include_initiatives=not no_initiatives,
        )
    )


@graphs.command(examples="  kgstore graphs delete 1f0c6c1e-6a55-4a8e-9d1e-2f3b6f1d8c11")
@click.argument("graph_id")
@click.pass_obj
def delete(app: AppContext, graph_id: str) -> None:
    """Delete a graph and all of its data. The default graph cannot be deleted."""
    from kgstore.services.graphs import GraphService

    app.emit(GraphService(app.store).delete_graph(graph_id))
