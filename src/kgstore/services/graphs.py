"""GraphService: graph management and snapshot exchange.

Wraps :class:`GraphStore` operations in :class:`ServiceResult` and adds
the file side of snapshot export/import (UTF-8 JSON documents).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from kgstore.domain.errors import KgStoreError
from kgstore.domain.layout import normalize_layout
from kgstore.domain.tree import iter_domain_ids
from kgstore.domain.types import DEFAULT_GRAPH_ID, CollectionKind
from kgstore.services.base import BaseService
from kgstore.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from kgstore.domain.snapshot import Snapshot


def snapshot_counts(snapshot: Snapshot) -> dict[str, int]:
    """Number of domains (whole tree) and entities per collection."""
    counts = {"domains": len(iter_domain_ids(snapshot.domains))}
    for kind in CollectionKind:
        counts[kind.value] = len(snapshot.collection(kind))
    return counts


class GraphService(BaseService):
    """List, create, delete graphs; export and import their snapshots."""

    def list_graphs(self) -> ServiceResult:
        op = "list_graphs"
        try:
            graphs = self._store.list_graphs()
        except KgStoreError as exc:
            return self._failure(op, exc)
        items = [graph.to_payload() for graph in graphs]
        return ServiceResult(ok=True, op=op, data={"items": items, "count": len(items)})

    def create_graph(
        self,
        name: str | None,
        *,
        source_graph_id: str | None = None,
        include_domains: bool = True,
        include_modules: bool = True,
        include_artifacts: bool = True,
        include_initiatives: bool = True,
    ) -> ServiceResult:
        """Create an empty graph, or a partial copy of *source_graph_id*."""
        op = "create_graph"
        try:
            graph = self._store.create_graph(
                name,
                source_graph_id,
                include_domains=include_domains,
                include_modules=include_modules,
                include_artifacts=include_artifacts,
                include_initiatives=include_initiatives,
            )
            copied = self._store.load_snapshot(graph.id) if source_graph_id else None
        except KgStoreError as exc:
            return self._failure(op, exc)

        data: dict[str, Any] = graph.to_payload()
        if copied is not None:
            data["sourceGraphId"] = source_graph_id
            data["counts"] = snapshot_counts(copied)
        return ServiceResult(ok=True, op=op, data=data)

    def delete_graph(self, graph_id: str) -> ServiceResult:
        op = "delete_graph"
        try:
            self._store.delete_graph(graph_id)
        except KgStoreError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"id": graph_id})

    def export_snapshot(self, graph_id: str, output: Path | None = None) -> ServiceResult:
        """Load the snapshot of *graph_id*; write it to *output* when given.

        Without *output* the full payload is returned in ``data["snapshot"]``.
        """
        op = "export_snapshot"
        try:
            snapshot = self._store.load_snapshot(graph_id)
        except KgStoreError as exc:
            return self._failure(op, exc)

        payload = snapshot.to_payload()
        data: dict[str, Any] = {"id": graph_id, "counts": snapshot_counts(snapshot)}
        if output is None:
            data["snapshot"] = payload
            return ServiceResult(ok=True, op=op, data=data)

        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            text = json.dumps(payload, ensure_ascii=False, indent=2)
            output.write_text(text + "\n", encoding="utf-8")
        except OSError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="IO_ERROR",
                    message=f"Cannot write {output}: {exc}",
                    detail={"path": str(output)},
                ),
            )
        data["output_file"] = str(output)
        return ServiceResult(ok=True, op=op, data=data)

    def import_snapshot(self, graph_id: str, source: Path | dict[str, Any]) -> ServiceResult:
        """Validate a snapshot (a JSON file or a decoded payload) and persist it.

        The graph's current snapshot is replaced atomically; a rejected
        payload leaves it untouched.
        """
        op = "import_snapshot"
        if isinstance(source, Path):
            try:
                payload: Any = json.loads(source.read_text(encoding="utf-8"))
            except OSError as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(
                        code="IO_ERROR",
                        message=f"Cannot read {source}: {exc}",
                        detail={"path": str(source)},
                    ),
                )
            except ValueError as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(
                        code="INVALID_JSON",
                        message=f"{source} is not valid JSON: {exc}",
                        detail={"path": str(source)},
                    ),
                )
        else:
            payload = source

        try:
            snapshot = self._store.persist_snapshot(graph_id, payload)
        except KgStoreError as exc:
            return self._failure(op, exc)

        warnings: list[str] = []
        if snapshot.layout is not None and normalize_layout(snapshot.layout) is None:
            warnings.append("Layout held no valid positions and was not stored")
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": graph_id, "counts": snapshot_counts(snapshot)},
            warnings=warnings,
        )

    def seed(self, graph_id: str = DEFAULT_GRAPH_ID) -> ServiceResult:
        """Seed *graph_id* with the reference dataset when it is empty."""
        op = "seed"
        try:
            seeded = self._store.seed_initial_data(graph_id)
        except KgStoreError as exc:
            return self._failure(op, exc)
        warnings = [] if seeded else [f"Graph '{graph_id}' already holds data; nothing seeded"]
        return ServiceResult(
            ok=True, op=op, data={"id": graph_id, "seeded": seeded}, warnings=warnings
        )
