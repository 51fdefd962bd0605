"""Row-level access to the ``graphs`` table.

Connection-scoped helpers shared by the registry and the snapshot
reader/writer. The caller owns the transaction.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, literal_column, select, update

from kgstore.domain.errors import NotFound
from kgstore.domain.snapshot import GraphSummary
from kgstore.infrastructure.database.schema import SCOPED_TABLES, graphs

if TYPE_CHECKING:
    from sqlalchemy import Connection


def utc_now() -> str:
    """ISO-8601 UTC timestamp with millisecond precision (``...Z``)."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_graph_id() -> str:
    return str(uuid.uuid4())


def _to_summary(row: Any) -> GraphSummary:
    return GraphSummary(
        id=str(row.id),
        name=str(row.name),
        is_default=bool(row.is_default),
        created_at=str(row.created_at),
        updated_at=str(row.updated_at) if row.updated_at else None,
    )


def get_graph(conn: Connection, graph_id: str) -> GraphSummary | None:
    row = conn.execute(select(graphs).where(graphs.c.id == graph_id)).first()
    return None if row is None else _to_summary(row)


def require_graph(conn: Connection, graph_id: str) -> GraphSummary:
    """Return the graph row or raise :class:`NotFound`."""
    graph = get_graph(conn, graph_id)
    if graph is None:
        raise NotFound(graph_id)
    return graph


def list_graph_rows(conn: Connection) -> list[GraphSummary]:
    """All graphs: the default first, then by creation time."""
    rows = conn.execute(
        select(graphs).order_by(
            graphs.c.is_default.desc(),
            graphs.c.created_at,
            literal_column("rowid"),
        )
    )
    return [_to_summary(row) for row in rows]


def insert_graph(
    conn: Connection,
    graph_id: str,
    name: str,
    *,
    created_at: str,
    is_default: bool = False,
    updated_at: str | None = None,
) -> None:
    conn.execute(
        insert(graphs).values(
            id=graph_id,
            name=name,
            is_default=int(is_default),
            created_at=created_at,
            updated_at=updated_at,
        )
    )


def touch_graph(conn: Connection, graph_id: str, timestamp: str) -> None:
    """Set ``updated_at`` of *graph_id*."""
    conn.execute(update(graphs).where(graphs.c.id == graph_id).values(updated_at=timestamp))


def delete_graph_rows(conn: Connection, graph_id: str) -> None:
    """Delete *graph_id* and every row scoped to it.

    Foreign keys cascade as well; the explicit deletes keep the guarantee
    for tables created without them.
    """
    for table in SCOPED_TABLES:
        conn.execute(delete(table).where(table.c.graph_id == graph_id))
    conn.execute(delete(graphs).where(graphs.c.id == graph_id))
