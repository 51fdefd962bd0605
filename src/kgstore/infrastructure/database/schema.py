"""SQLAlchemy Core table definitions for the multi-graph store.

Every data table is scoped by ``graph_id`` and cascades on graph
deletion. Entity payloads (``data``) and domain extras (``attributes``)
are JSON text the store never inspects.

``domains`` carries no self-referencing foreign key on ``parent_id``:
rows with a dangling parent are tolerated and dropped on read.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, Table, Text

from kgstore.domain.types import CollectionKind

metadata = MetaData()

graphs = Table(
    "graphs",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("is_default", Integer, nullable=False, default=0, server_default="0"),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text),
)

graph_metadata = Table(
    "graph_metadata",
    metadata,
    Column(
        "graph_id",
        Text,
        ForeignKey("graphs.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("key", Text, primary_key=True),
    Column("value", Text, nullable=False),
)

domains = Table(
    "domains",
    metadata,
    Column(
        "graph_id",
        Text,
        ForeignKey("graphs.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("parent_id", Text),
    Column("position", Integer, nullable=False),
    Column("attributes", Text),  # JSON object of undeclared node fields
)


def _entity_table(name: str) -> Table:
    return Table(
        name,
        metadata,
        Column(
            "graph_id",
            Text,
            ForeignKey("graphs.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        Column("id", Text, primary_key=True),
        Column("position", Integer, nullable=False),
        Column("data", Text, nullable=False),  # JSON payload
    )


modules = _entity_table("modules")
artifacts = _entity_table("artifacts")
initiatives = _entity_table("initiatives")
experts = _entity_table("experts")

ENTITY_TABLES: dict[CollectionKind, Table] = {
    CollectionKind.MODULES: modules,
    CollectionKind.ARTIFACTS: artifacts,
    CollectionKind.INITIATIVES: initiatives,
    CollectionKind.EXPERTS: experts,
}

# Tables holding rows scoped to one graph, in delete order.
SCOPED_TABLES: tuple[Table, ...] = (
    graph_metadata,
    experts,
    initiatives,
    artifacts,
    modules,
    domains,
)

# ---------------------------------------------------------------------------
# Indexes for ordered reads
# ---------------------------------------------------------------------------

Index("ix_domains_parent", domains.c.graph_id, domains.c.parent_id, domains.c.position)
for _table in ENTITY_TABLES.values():
    Index(f"ix_{_table.name}_position", _table.c.graph_id, _table.c.position)
