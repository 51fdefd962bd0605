"""First-run seeding of the default graph from the reference dataset."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kgstore.domain.types import DEFAULT_GRAPH_ID, CollectionKind
from kgstore.infrastructure.database.domain_rows import count_domain_rows
from kgstore.infrastructure.database.entities import COLLECTIONS
from kgstore.infrastructure.database.graph_rows import utc_now
from kgstore.infrastructure.reference import reference_snapshot
from kgstore.infrastructure.snapshots import write_snapshot

if TYPE_CHECKING:
    from sqlalchemy import Connection

logger = logging.getLogger(__name__)


def stored_row_counts(conn: Connection, graph_id: str) -> dict[str, int]:
    """Row count per data table for *graph_id*."""
    counts = {"domains": count_domain_rows(conn, graph_id)}
    for kind in CollectionKind:
        counts[kind.value] = COLLECTIONS[kind].count(conn, graph_id)
    return counts


def seed_initial_data(conn: Connection, graph_id: str = DEFAULT_GRAPH_ID) -> bool:
    """Write the reference dataset into *graph_id* if it holds no data at all.

    All five tables are checked before anything is written; a single row
    in any of them means the graph is left alone. Returns True if seeded.
    """
    counts = stored_row_counts(conn, graph_id)
    if any(counts.values()):
        logger.debug("Skipping seed of graph %s: %s", graph_id, counts)
        return False

    snapshot = reference_snapshot().model_copy(update={"exported_at": utc_now()})
    write_snapshot(conn, graph_id, snapshot)
    logger.info(
        "Seeded graph %s with %d modules, %d artifacts, %d experts",
        graph_id,
        len(snapshot.modules),
        len(snapshot.artifacts),
        len(snapshot.experts),
    )
    return True
