"""Schema creation and legacy-layout migration.

:func:`prepare_store` runs once per initialization, inside one
transaction: create missing tables, make sure the default graph row
exists (legacy rows are attached to it), then fold any legacy layout
into the current one. Running it again changes nothing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kgstore.infrastructure.database.migrations.legacy import (
    LEGACY_TABLES,
    add_domain_attributes,
    merge_renamed_initiatives,
    migrate_metadata,
    migrate_table,
)
from kgstore.infrastructure.database.schema import metadata

if TYPE_CHECKING:
    from sqlalchemy import Connection

logger = logging.getLogger(__name__)


def ensure_schema(conn: Connection) -> None:
    """Create every table of the current layout that does not exist yet."""
    metadata.create_all(conn, checkfirst=True)


def migrate_legacy_schema(conn: Connection) -> list[str]:
    """Apply every pending legacy step. Returns the names of steps that did work.

    The default graph row must already exist.
    """
    applied: list[str] = []
    for table in LEGACY_TABLES:
        if migrate_table(conn, table):
            applied.append(f"scope:{table.name}")
    if merge_renamed_initiatives(conn):
        applied.append("merge:initiative_rows")
    if add_domain_attributes(conn):
        applied.append("column:domains.attributes")
    if migrate_metadata(conn):
        applied.append("scope:metadata")
    return applied


def prepare_store(conn: Connection, *, default_name: str | None = None) -> list[str]:
    """Create the schema, the default graph row, then migrate legacy tables."""
    from kgstore.infrastructure.registry import ensure_default_graph

    ensure_schema(conn)
    if default_name:
        ensure_default_graph(conn, name=default_name)
    else:
        ensure_default_graph(conn)
    applied = migrate_legacy_schema(conn)
    if applied:
        logger.info("Store migrated: %s", ", ".join(applied))
    return applied


__all__ = ["ensure_schema", "migrate_legacy_schema", "prepare_store"]
