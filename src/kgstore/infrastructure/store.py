"""GraphStore: the public entry point of the persistence engine.

Owns the :class:`StoreHandle` for its whole lifetime and composes the
registry, the snapshot reader/writer and the seeder over it::

    store = GraphStore.initialize(Path("data/graph.db"))
    try:
        snapshot = store.load_snapshot("main")
        store.persist_snapshot("main", snapshot)
    finally:
        store.close()

One instance per image file per process.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from kgstore.domain.types import DEFAULT_GRAPH_ID, Scope
from kgstore.infrastructure.database.engine import StoreHandle
from kgstore.infrastructure.database.migrations import prepare_store
from kgstore.infrastructure.registry import GraphRegistry
from kgstore.infrastructure.seed import seed_initial_data
from kgstore.infrastructure.snapshots import SnapshotStore

if TYPE_CHECKING:
    from collections.abc import Mapping

    from kgstore.config.settings import KgSettings
    from kgstore.domain.snapshot import GraphSummary, Snapshot

logger = logging.getLogger(__name__)


class GraphStore:
    """Multi-graph snapshot store over one embedded SQLite image."""

    def __init__(self, handle: StoreHandle, *, copy_name_prefix: str = "Graph") -> None:
        self._handle = handle
        self._registry = GraphRegistry(handle, copy_name_prefix=copy_name_prefix)
        self._snapshots = SnapshotStore(handle)
        self.migrations_applied: list[str] = []
        self.seeded = False

    @classmethod
    def initialize(
        cls,
        path: str | Path | None = None,
        *,
        seed: bool | None = None,
        settings: KgSettings | None = None,
        in_memory: bool = False,
    ) -> GraphStore:
        """Open the image, bring it to the current layout, optionally seed.

        Args:
            path: Image location. Defaults to what *settings* resolve, or
                ``data/graph.db`` under the CWD without settings.
            seed: Seed an empty default graph with the reference dataset.
                None defers to ``[store] seed_initial_data`` (default True).
            settings: Source of defaults for path, seeding and names.
            in_memory: Keep the store in memory only; nothing is written.

        Schema creation, the default graph and any legacy migration commit
        as one transaction. The image is written before returning.
        """
        if in_memory:
            image_path = None
        elif settings is not None:
            image_path = settings.resolve_database_path(path)
        else:
            image_path = Path(path) if path is not None else Path("data") / "graph.db"

        if seed is None:
            seed = settings.store.seed_initial_data if settings is not None else True
        default_name = settings.graphs.default_name if settings is not None else None
        copy_prefix = settings.graphs.copy_name_prefix if settings is not None else "Graph"

        handle = StoreHandle.open(image_path)
        store = cls(handle, copy_name_prefix=copy_prefix)
        try:
            with handle.transaction() as conn:
                store.migrations_applied = prepare_store(conn, default_name=default_name)
                if seed:
                    store.seeded = seed_initial_data(conn, DEFAULT_GRAPH_ID)
        except BaseException:
            handle.close()
            raise
        logger.info(
            "Graph store ready at %s (seeded=%s)",
            image_path or ":memory:",
            store.seeded,
        )
        return store

    @property
    def path(self) -> Path | None:
        return self._handle.path

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def close(self) -> None:
        """Release the database. Safe to call twice."""
        self._handle.close()

    def __enter__(self) -> GraphStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- Registry ---

    def list_graphs(self) -> list[GraphSummary]:
        return self._registry.list_graphs()

    def get_graph(self, graph_id: str) -> GraphSummary:
        return self._registry.get_graph(graph_id)

    def create_graph(
        self,
        name: str | None,
        source_graph_id: str | None = None,
        *,
        include_domains: bool = True,
        include_modules: bool = True,
        include_artifacts: bool = True,
        include_initiatives: bool = True,
    ) -> GraphSummary:
        """Create a graph, empty or as a partial copy of *source_graph_id*."""
        flags = {
            Scope.DOMAINS: include_domains,
            Scope.MODULES: include_modules,
            Scope.ARTIFACTS: include_artifacts,
            Scope.INITIATIVES: include_initiatives,
        }
        scopes = {scope for scope, included in flags.items() if included}
        return self._registry.create_graph(name, source_graph_id, scopes=scopes)

    def delete_graph(self, graph_id: str) -> None:
        self._registry.delete_graph(graph_id)

    # --- Snapshots ---

    def load_snapshot(self, graph_id: str) -> Snapshot:
        return self._snapshots.load(graph_id)

    def persist_snapshot(self, graph_id: str, snapshot: Snapshot | Mapping[str, Any]) -> Snapshot:
        return self._snapshots.persist(graph_id, snapshot)

    def seed_initial_data(self, graph_id: str = DEFAULT_GRAPH_ID) -> bool:
        """Seed *graph_id* with the reference dataset if it holds no rows."""
        with self._handle.transaction() as conn:
            return seed_initial_data(conn, graph_id)
