"""Error taxonomy for the graph store.

Every failure the store surfaces derives from :class:`KgStoreError`.
The ``code`` attribute is stable and is what the service layer copies
into :class:`~kgstore.services.result.ServiceError`.

- ``NotFound``: an unknown graph id was referenced.
- ``InvalidOperation``: the request breaks a store invariant
  (deleting the default graph).
- ``ValidationFailure``: a snapshot payload has the wrong shape.
- ``StorageFailure``: the embedded database or the on-disk image failed.

The first three are caller errors and are never retried.
"""

from __future__ import annotations

from typing import Any


class KgStoreError(Exception):
    """Base exception for all store errors.

    Attributes:
        message: Human-readable description.
        code: Stable machine-readable code.
        details: Additional context for debugging.
    """

    code = "KGSTORE_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFound(KgStoreError):
    """An unknown graph id was referenced."""

    code = "NOT_FOUND"

    def __init__(self, graph_id: str) -> None:
        super().__init__(f"Graph '{graph_id}' not found", details={"graph_id": graph_id})
        self.graph_id = graph_id


class InvalidOperation(KgStoreError):
    """The operation would break a store invariant."""

    code = "INVALID_OPERATION"


class ValidationFailure(KgStoreError):
    """A snapshot payload was rejected before any write."""

    code = "VALIDATION_FAILED"

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message, details={"errors": errors or []})
        self.errors = errors or []


class StorageFailure(KgStoreError):
    """The embedded database or its on-disk image could not be written or read."""

    code = "STORAGE_FAILED"
