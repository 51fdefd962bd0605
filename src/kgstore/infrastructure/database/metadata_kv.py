"""Per-graph key/value metadata (``graph_metadata`` table).

Snapshot version, export timestamp and the layout blob live here rather
than in columns, so new keys need no schema change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from kgstore.infrastructure.database.schema import graph_metadata

if TYPE_CHECKING:
    from sqlalchemy import Connection


def read_metadata(conn: Connection, graph_id: str, key: str) -> str | None:
    """Return the stored value for *key*, or None."""
    row = conn.execute(
        select(graph_metadata.c.value).where(
            graph_metadata.c.graph_id == graph_id,
            graph_metadata.c.key == key,
        )
    ).first()
    return None if row is None else str(row.value)


def upsert_metadata(conn: Connection, graph_id: str, key: str, value: str) -> None:
    """Insert or overwrite *key* for *graph_id*."""
    stmt = sqlite_insert(graph_metadata).values(graph_id=graph_id, key=key, value=value)
    conn.execute(
        stmt.on_conflict_do_update(
            index_elements=[graph_metadata.c.graph_id, graph_metadata.c.key],
            set_={"value": stmt.excluded.value},
        )
    )


def delete_metadata(conn: Connection, graph_id: str, key: str) -> None:
    conn.execute(
        delete(graph_metadata).where(
            graph_metadata.c.graph_id == graph_id,
            graph_metadata.c.key == key,
        )
    )
