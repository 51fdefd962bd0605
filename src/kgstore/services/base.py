"""BaseService: foundation for kgstore services.

Every service receives an open :class:`GraphStore` at construction time.
The store owns transactions; services translate store exceptions into
error results and shape success payloads for the CLI.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kgstore.domain.errors import StorageFailure
from kgstore.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from kgstore.domain.errors import KgStoreError
    from kgstore.infrastructure.store import GraphStore

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class GraphService(BaseService):
            def delete_graph(self, graph_id: str) -> ServiceResult:
                try:
                    self._store.delete_graph(graph_id)
                except KgStoreError as exc:
                    return self._failure("delete_graph", exc)
                ...
    """

    def __init__(self, store: GraphStore) -> None:
        self._store = store

    @staticmethod
    def _failure(op: str, exc: KgStoreError, warnings: list[str] | None = None) -> ServiceResult:
        """Error result for *exc*; storage failures are logged with traceback."""
        if isinstance(exc, StorageFailure):
            logger.error("%s failed: %s", op, exc.message, exc_info=exc)
        else:
            logger.debug("%s rejected: %s", op, exc.message)
        return ServiceResult(
            ok=False,
            op=op,
            warnings=warnings or [],
            error=ServiceError.from_exception(exc),
        )
