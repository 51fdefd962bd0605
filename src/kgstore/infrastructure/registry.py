"""Graph registry: list, create, copy and delete graphs.

The default graph (id ``main``) always exists and is the only graph
flagged ``is_default``. It is created at initialization and can never be
deleted. Other graphs get a random UUID, start empty, or start as a
partial copy of an existing graph.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import update

from kgstore.domain.errors import InvalidOperation
from kgstore.domain.layout import normalize_layout
from kgstore.domain.snapshot import GraphSummary, Snapshot
from kgstore.domain.types import DEFAULT_GRAPH_ID, Scope
from kgstore.infrastructure.database.graph_rows import (
    delete_graph_rows,
    get_graph,
    insert_graph,
    list_graph_rows,
    new_graph_id,
    require_graph,
    touch_graph,
    utc_now,
)
from kgstore.infrastructure.database.schema import graphs
from kgstore.infrastructure.snapshots import read_snapshot, write_snapshot

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Connection

    from kgstore.infrastructure.database.engine import StoreHandle

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_NAME = "Main"
COPY_NAME_PREFIX = "Graph"

# Scopes a copy includes unless told otherwise. Experts are always copied.
COPYABLE_SCOPES: frozenset[Scope] = frozenset(
    {Scope.DOMAINS, Scope.MODULES, Scope.ARTIFACTS, Scope.INITIATIVES}
)


def ensure_default_graph(conn: Connection, *, name: str = DEFAULT_GRAPH_NAME) -> bool:
    """Create the default graph row if missing and make it the only default.

    Returns True if anything changed.
    """
    existing = get_graph(conn, DEFAULT_GRAPH_ID)
    changed = False
    if existing is None:
        now = utc_now()
        insert_graph(conn, DEFAULT_GRAPH_ID, name, created_at=now, updated_at=now, is_default=True)
        logger.info("Created default graph %r", DEFAULT_GRAPH_ID)
        changed = True
    elif not existing.is_default:
        conn.execute(update(graphs).where(graphs.c.id == DEFAULT_GRAPH_ID).values(is_default=1))
        changed = True

    demoted = conn.execute(
        update(graphs)
        .where(graphs.c.id != DEFAULT_GRAPH_ID, graphs.c.is_default != 0)
        .values(is_default=0)
    ).rowcount
    return changed or bool(demoted)


def copy_name(name: str | None, now: str, *, prefix: str = COPY_NAME_PREFIX) -> str:
    """Trimmed *name*, or ``"<prefix> YYYY-MM-DD"`` when blank."""
    cleaned = (name or "").strip()
    return cleaned or f"{prefix} {now[:10]}"


def partial_copy(source: Snapshot, scopes: Iterable[Scope], *, exported_at: str) -> Snapshot:
    """Return a new snapshot holding only *scopes* of *source*.

    Experts are always carried over. The layout describes module
    positions, so it travels with the modules scope.
    """
    wanted = set(scopes)
    return Snapshot.model_construct(
        version=source.version,
        exported_at=exported_at,
        domains=list(source.domains) if Scope.DOMAINS in wanted else [],
        modules=list(source.modules) if Scope.MODULES in wanted else [],
        artifacts=list(source.artifacts) if Scope.ARTIFACTS in wanted else [],
        initiatives=list(source.initiatives) if Scope.INITIATIVES in wanted else [],
        experts=list(source.experts),
        layout=normalize_layout(source.layout) if Scope.MODULES in wanted else None,
    )


class GraphRegistry:
    """Graph-level operations over a :class:`StoreHandle`.

    Each mutation runs in one transaction and exports the image on commit.
    """

    def __init__(self, handle: StoreHandle, *, copy_name_prefix: str = COPY_NAME_PREFIX) -> None:
        self._handle = handle
        self._copy_name_prefix = copy_name_prefix

    def list_graphs(self) -> list[GraphSummary]:
        """All graphs, the default first, then by creation time."""
        with self._handle.connect() as conn:
            return list_graph_rows(conn)

    def get_graph(self, graph_id: str) -> GraphSummary:
        with self._handle.connect() as conn:
            return require_graph(conn, graph_id)

    def create_graph(
        self,
        name: str | None,
        source_graph_id: str | None = None,
        *,
        scopes: Iterable[Scope] = COPYABLE_SCOPES,
    ) -> GraphSummary:
        """Create a graph, empty or as a partial copy of *source_graph_id*.

        The new row and the copied data commit together. A missing source
        raises :class:`NotFound` and leaves no trace.
        """
        now = utc_now()
        graph_name = copy_name(name, now, prefix=self._copy_name_prefix)
        graph_id = new_graph_id()

        with self._handle.transaction() as conn:
            insert_graph(conn, graph_id, graph_name, created_at=now)
            if source_graph_id:
                source = read_snapshot(conn, source_graph_id)
                write_snapshot(conn, graph_id, partial_copy(source, scopes, exported_at=now))
            else:
                touch_graph(conn, graph_id, now)
            created = require_graph(conn, graph_id)

        logger.info(
            "Created graph %s (%r)%s",
            graph_id,
            graph_name,
            f" from {source_graph_id}" if source_graph_id else "",
        )
        return created

    def delete_graph(self, graph_id: str) -> None:
        """Delete a non-default graph and all of its rows.

        Raises:
            InvalidOperation: For the default graph.
            NotFound: If the graph does not exist.
        """
        if graph_id == DEFAULT_GRAPH_ID:
            raise InvalidOperation(
                "The default graph cannot be deleted", details={"graph_id": graph_id}
            )
        with self._handle.transaction() as conn:
            require_graph(conn, graph_id)
            delete_graph_rows(conn, graph_id)
        logger.info("Deleted graph %s", graph_id)
