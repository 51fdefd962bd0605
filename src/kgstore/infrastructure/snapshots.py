"""Snapshot reader/writer.

Assembles a :class:`Snapshot` from the domain rows, the four entity
collections and the per-graph metadata, and writes one back. Both
functions run on a caller-owned connection; :class:`SnapshotStore` wraps
them in the handle's read and write scopes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from kgstore.domain.layout import dump_layout, normalize_layout, parse_layout
from kgstore.domain.snapshot import Snapshot, validate_snapshot
from kgstore.domain.tree import flatten, rebuild
from kgstore.domain.types import (
    EXPERTS_SINCE_VERSION,
    SNAPSHOT_VERSION,
    CollectionKind,
    MetadataKey,
)
from kgstore.infrastructure.database.domain_rows import read_domain_rows, write_domain_rows
from kgstore.infrastructure.database.entities import COLLECTIONS
from kgstore.infrastructure.database.graph_rows import require_graph, touch_graph, utc_now
from kgstore.infrastructure.database.metadata_kv import (
    delete_metadata,
    read_metadata,
    upsert_metadata,
)
from kgstore.infrastructure.reference import reference_experts

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from kgstore.infrastructure.database.engine import StoreHandle

logger = logging.getLogger(__name__)


def _parse_version(raw: str | None, graph_id: str) -> int:
    if raw is None:
        return SNAPSHOT_VERSION
    try:
        return int(raw)
    except ValueError:
        logger.warning("Graph %s has an unreadable snapshot version %r", graph_id, raw)
        return SNAPSHOT_VERSION


def read_snapshot(conn: Connection, graph_id: str) -> Snapshot:
    """Assemble the current snapshot of *graph_id*. Performs no writes.

    Graphs stored before experts were a collection, and holding no expert
    rows, are returned with the reference expert list.

    Raises:
        NotFound: If the graph does not exist.
    """
    require_graph(conn, graph_id)

    domains = rebuild(read_domain_rows(conn, graph_id))
    collections = {kind: COLLECTIONS[kind].read(conn, graph_id) for kind in CollectionKind}

    version = _parse_version(read_metadata(conn, graph_id, MetadataKey.SNAPSHOT_VERSION), graph_id)
    exported_at = read_metadata(conn, graph_id, MetadataKey.EXPORTED_AT)
    layout = parse_layout(read_metadata(conn, graph_id, MetadataKey.LAYOUT))

    experts = collections[CollectionKind.EXPERTS]
    if version < EXPERTS_SINCE_VERSION and not experts:
        logger.debug("Backfilling reference experts for graph %s (version %d)", graph_id, version)
        experts = reference_experts()

    return Snapshot.model_construct(
        version=version,
        exported_at=exported_at,
        domains=domains,
        modules=collections[CollectionKind.MODULES],
        artifacts=collections[CollectionKind.ARTIFACTS],
        initiatives=collections[CollectionKind.INITIATIVES],
        experts=experts,
        layout=layout,
    )


def write_snapshot(conn: Connection, graph_id: str, snapshot: Snapshot) -> str:
    """Fully replace the stored snapshot of *graph_id*.

    Returns the timestamp recorded as the graph's ``updatedAt``: the
    snapshot's ``exportedAt`` or, when absent, the current time.

    Raises:
        NotFound: If the graph does not exist.
    """
    require_graph(conn, graph_id)
    timestamp = snapshot.exported_at or utc_now()

    write_domain_rows(conn, graph_id, flatten(snapshot.domains))
    for kind in CollectionKind:
        COLLECTIONS[kind].write(conn, graph_id, snapshot.collection(kind))

    layout = normalize_layout(snapshot.layout)
    if layout:
        upsert_metadata(conn, graph_id, MetadataKey.LAYOUT, dump_layout(layout))
    else:
        delete_metadata(conn, graph_id, MetadataKey.LAYOUT)

    upsert_metadata(conn, graph_id, MetadataKey.SNAPSHOT_VERSION, str(snapshot.version))
    upsert_metadata(conn, graph_id, MetadataKey.EXPORTED_AT, timestamp)
    touch_graph(conn, graph_id, timestamp)
    return timestamp


class SnapshotStore:
    """Load and persist whole snapshots through a :class:`StoreHandle`."""

    def __init__(self, handle: StoreHandle) -> None:
        self._handle = handle

    def load(self, graph_id: str) -> Snapshot:
        with self._handle.connect() as conn:
            return read_snapshot(conn, graph_id)

    def persist(self, graph_id: str, snapshot: Snapshot | Mapping[str, Any]) -> Snapshot:
        """Validate *snapshot* and replace the graph's state in one transaction.

        On any failure the previous snapshot is left untouched.

        Raises:
            ValidationFailure: If the payload does not have the snapshot shape.
            NotFound: If the graph does not exist.
            StorageFailure: If the database write fails.
        """
        validated = validate_snapshot(snapshot)
        with self._handle.transaction() as conn:
            timestamp = write_snapshot(conn, graph_id, validated)
        logger.info(
            "Persisted snapshot for graph %s (%d root domains, %d modules)",
            graph_id,
            len(validated.domains),
            len(validated.modules),
        )
        return validated.model_copy(update={"exported_at": timestamp})
