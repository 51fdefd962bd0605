"""InitService: open (or create) a store image and report what happened."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kgstore.domain.errors import KgStoreError
from kgstore.infrastructure.store import GraphStore
from kgstore.services.base import BaseService
from kgstore.services.result import ServiceResult

if TYPE_CHECKING:
    from pathlib import Path

    from kgstore.config.settings import KgSettings


class InitService:
    """Initialization runs before any store exists, so it is not a BaseService."""

    @staticmethod
    def init_store(
        settings: KgSettings,
        *,
        seed: bool | None = None,
        path: Path | None = None,
    ) -> ServiceResult:
        """Create schema, default graph and seed data; migrate legacy images.

        Running it again on an initialized image changes nothing.
        """
        op = "init_store"
        try:
            store = GraphStore.initialize(path, seed=seed, settings=settings)
        except KgStoreError as exc:
            return BaseService._failure(op, exc)

        try:
            graphs = store.list_graphs()
        except KgStoreError as exc:
            return BaseService._failure(op, exc)
        finally:
            store.close()

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": str(store.path),
                "seeded": store.seeded,
                "migrations": store.migrations_applied,
                "graph_count": len(graphs),
            },
        )
