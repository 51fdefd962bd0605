"""Persistence of flattened domain rows.

Rows come from :func:`kgstore.domain.tree.flatten` and go back through
:func:`kgstore.domain.tree.rebuild`. Undeclared node fields travel in the
``attributes`` JSON column. The caller owns the transaction.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, select

from kgstore.domain.tree import DomainRow
from kgstore.infrastructure.database.schema import domains

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Connection

logger = logging.getLogger(__name__)


def _load_attributes(raw: str | None) -> dict[str, Any] | None:
    if not raw:
        return None
    try:
        decoded = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring undecodable domain attributes: %.60s", raw)
        return None
    return decoded if isinstance(decoded, dict) else None


def write_domain_rows(conn: Connection, graph_id: str, rows: Sequence[DomainRow]) -> int:
    """Replace the domain rows of *graph_id*. Returns the row count."""
    conn.execute(delete(domains).where(domains.c.graph_id == graph_id))
    if not rows:
        return 0
    conn.execute(
        insert(domains),
        [
            {
                "graph_id": graph_id,
                "id": row.id,
                "name": row.name,
                "description": row.description,
                "parent_id": row.parent_id,
                "position": row.position,
                "attributes": (
                    json.dumps(row.attributes, ensure_ascii=False) if row.attributes else None
                ),
            }
            for row in rows
        ],
    )
    return len(rows)


def read_domain_rows(conn: Connection, graph_id: str) -> list[DomainRow]:
    """Return every domain row of *graph_id* (unordered; rebuild sorts)."""
    result = conn.execute(
        select(
            domains.c.id,
            domains.c.name,
            domains.c.description,
            domains.c.parent_id,
            domains.c.position,
            domains.c.attributes,
        ).where(domains.c.graph_id == graph_id)
    )
    return [
        DomainRow(
            id=str(row.id),
            name=str(row.name),
            description=row.description,
            parent_id=row.parent_id,
            position=int(row.position),
            attributes=_load_attributes(row.attributes),
        )
        for row in result
    ]


def count_domain_rows(conn: Connection, graph_id: str) -> int:
    result = conn.execute(
        select(func.count()).select_from(domains).where(domains.c.graph_id == graph_id)
    ).scalar_one()
    return int(result)
