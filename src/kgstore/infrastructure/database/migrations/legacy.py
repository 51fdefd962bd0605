"""Migration of single-graph stores into the multi-graph layout.

Older images kept one graph per file: data tables had no ``graph_id``
column and per-graph scalars lived in a ``metadata(key, value)`` table.
Every pre-existing row is attached to the default graph.

Each step is resumable. A table is first renamed to ``legacy_<name>``,
the new table is created, rows are copied with ``INSERT OR IGNORE`` and
the legacy table is dropped. A leftover ``legacy_<name>`` from an
interrupted run is picked up where it stopped, so shape detection is
never the only signal. On a fresh or migrated store every step is a
no-op.

DDL goes through Alembic's :class:`Operations` bound to the caller's
connection; the caller owns the transaction.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import sqlalchemy as sa
from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext

from kgstore.domain.types import DEFAULT_GRAPH_ID
from kgstore.infrastructure.database.schema import (
    artifacts,
    domains,
    graph_metadata,
    initiatives,
    modules,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection, Table

logger = logging.getLogger(__name__)

# Pre-release images stored initiatives under this name.
RENAMED_INITIATIVES_TABLE = "initiative_rows"
LEGACY_METADATA_TABLE = "metadata"


def _operations(conn: Connection) -> Operations:
    return Operations(MigrationContext.configure(conn))


def _table_names(conn: Connection) -> set[str]:
    return set(sa.inspect(conn).get_table_names())


def _column_names(conn: Connection, table_name: str) -> list[str]:
    return [col["name"] for col in sa.inspect(conn).get_columns(table_name)]


def _copy_rows(
    conn: Connection,
    source_name: str,
    target: Table,
    *,
    graph_id: str | None,
) -> int:
    """Copy shared columns from *source_name* into *target*, skipping conflicts.

    With *graph_id* set, the source has no ``graph_id`` column and every
    row is attached to that graph.
    """
    source_cols = _column_names(conn, source_name)
    target_cols = {col.name for col in target.columns}
    shared = [name for name in source_cols if name in target_cols and name != "graph_id"]
    source = sa.table(source_name, *(sa.column(name) for name in source_cols))

    if graph_id is not None:
        selected = sa.select(sa.literal(graph_id), *(source.c[name] for name in shared))
    else:
        selected = sa.select(source.c["graph_id"], *(source.c[name] for name in shared))

    stmt = (
        sa.insert(target)
        .from_select(["graph_id", *shared], selected)
        .prefix_with("OR IGNORE")
    )
    return conn.execute(stmt).rowcount


def migrate_table(conn: Connection, table: Table) -> bool:
    """Bring *table* into the graph-scoped layout. Returns True if work was done."""
    ops = _operations(conn)
    legacy_name = f"legacy_{table.name}"
    tables = _table_names(conn)

    if (
        table.name in tables
        and legacy_name not in tables
        and "graph_id" not in _column_names(conn, table.name)
    ):
        ops.rename_table(table.name, legacy_name)
        tables = _table_names(conn)

    if legacy_name not in tables:
        return False

    if table.name not in tables:
        table.create(conn)
    copied = _copy_rows(conn, legacy_name, table, graph_id=DEFAULT_GRAPH_ID)
    ops.drop_table(legacy_name)
    logger.info("Migrated %s into graph %s (%d rows)", table.name, DEFAULT_GRAPH_ID, copied)
    return True


def migrate_metadata(conn: Connection) -> bool:
    """Move the single-graph ``metadata`` table into ``graph_metadata``."""
    ops = _operations(conn)
    legacy_name = f"legacy_{LEGACY_METADATA_TABLE}"
    tables = _table_names(conn)

    if LEGACY_METADATA_TABLE in tables and legacy_name not in tables:
        ops.rename_table(LEGACY_METADATA_TABLE, legacy_name)
        tables = _table_names(conn)

    if legacy_name not in tables:
        return False

    copied = _copy_rows(conn, legacy_name, graph_metadata, graph_id=DEFAULT_GRAPH_ID)
    ops.drop_table(legacy_name)
    logger.info("Migrated legacy metadata into graph %s (%d keys)", DEFAULT_GRAPH_ID, copied)
    return True


def merge_renamed_initiatives(conn: Connection) -> bool:
    """Fold ``initiative_rows`` (already graph-scoped) into ``initiatives``."""
    if RENAMED_INITIATIVES_TABLE not in _table_names(conn):
        return False
    copied = _copy_rows(conn, RENAMED_INITIATIVES_TABLE, initiatives, graph_id=None)
    _operations(conn).drop_table(RENAMED_INITIATIVES_TABLE)
    logger.info("Merged %s into initiatives (%d rows)", RENAMED_INITIATIVES_TABLE, copied)
    return True


def add_domain_attributes(conn: Connection) -> bool:
    """Add the ``attributes`` column to domain tables created before it existed."""
    if "attributes" in _column_names(conn, domains.name):
        return False
    _operations(conn).add_column(domains.name, sa.Column("attributes", sa.Text()))
    logger.info("Added attributes column to domains")
    return True


LEGACY_TABLES: tuple[Table, ...] = (domains, modules, artifacts, initiatives)
