"""Snapshot and graph summary models.

A snapshot is the complete state of one graph: the domain tree, four
flat entity collections and an optional layout. Entity records are
opaque JSON objects; the only field the store relies on is ``id``.

The wire form uses camelCase (``exportedAt``, ``isDefault``) so payloads
exchanged with the visualization front end stay unchanged.
:func:`validate_snapshot` is the shape check callers run before
persisting.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from kgstore.domain.errors import ValidationFailure
from kgstore.domain.types import SNAPSHOT_VERSION, CollectionKind


class DomainNode(BaseModel):
    """A node of the recursive domain taxonomy.

    ``children`` is None for a leaf, never an empty list. Fields beyond
    the four declared ones (e.g. ``isCatalogRoot``) are kept as extras and
    survive a store round trip.
    """

    model_config = {"extra": "allow"}

    id: str = Field(min_length=1)
    name: str
    description: str | None = None
    children: list[DomainNode] | None = None

    @field_validator("children")
    @classmethod
    def _empty_children_is_leaf(cls, value: list[DomainNode] | None) -> list[DomainNode] | None:
        return value or None

    @property
    def attributes(self) -> dict[str, Any]:
        """Undeclared fields carried through verbatim."""
        return dict(self.model_extra or {})

    def to_payload(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.description is not None:
            data["description"] = self.description
        data.update(self.attributes)
        if self.children:
            data["children"] = [child.to_payload() for child in self.children]
        return data


DomainNode.model_rebuild()


class Snapshot(BaseModel):
    """The complete current state of one graph.

    Attributes:
        version: Snapshot format version the payload was written with.
        exported_at: ISO timestamp of the export (``exportedAt`` on the wire).
        domains: Root level of the domain tree.
        modules, artifacts, initiatives, experts: Ordered entity payloads.
        layout: Optional ``{"nodes": {...}}`` position map.
    """

    model_config = {"populate_by_name": True, "extra": "ignore"}

    version: int = SNAPSHOT_VERSION
    exported_at: str | None = Field(default=None, alias="exportedAt")
    domains: list[DomainNode]
    modules: list[dict[str, Any]]
    artifacts: list[dict[str, Any]]
    initiatives: list[dict[str, Any]] = Field(default_factory=list)
    experts: list[dict[str, Any]] = Field(default_factory=list)
    layout: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _check_ids(self) -> Snapshot:
        for kind in CollectionKind:
            seen: set[str] = set()
            for index, item in enumerate(self.collection(kind)):
                item_id = item.get("id")
                if not isinstance(item_id, str) or not item_id:
                    msg = f"{kind}[{index}] must carry a non-empty string 'id'"
                    raise ValueError(msg)
                if item_id in seen:
                    msg = f"Duplicate id {item_id!r} in {kind}"
                    raise ValueError(msg)
                seen.add(item_id)

        domain_ids: set[str] = set()
        stack = list(self.domains)
        while stack:
            node = stack.pop()
            if node.id in domain_ids:
                msg = f"Duplicate domain id {node.id!r}"
                raise ValueError(msg)
            domain_ids.add(node.id)
            stack.extend(node.children or ())
        return self

    def collection(self, kind: CollectionKind) -> list[dict[str, Any]]:
        """Return the entity list for *kind*."""
        items: list[dict[str, Any]] = getattr(self, kind.value)
        return items

    def to_payload(self) -> dict[str, Any]:
        """Render the camelCase wire form."""
        payload: dict[str, Any] = {"version": self.version}
        if self.exported_at is not None:
            payload["exportedAt"] = self.exported_at
        payload["domains"] = [node.to_payload() for node in self.domains]
        for kind in CollectionKind:
            payload[kind.value] = list(self.collection(kind))
        if self.layout is not None:
            payload["layout"] = self.layout
        return payload


class GraphSummary(BaseModel):
    """Identity row of one graph."""

    model_config = {"frozen": True, "populate_by_name": True}

    id: str
    name: str
    is_default: bool = Field(alias="isDefault")
    created_at: str = Field(alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def validate_snapshot(payload: Any) -> Snapshot:
    """Check *payload* has the snapshot shape and return it as a model.

    ``domains``, ``modules`` and ``artifacts`` are required lists;
    ``initiatives`` and ``experts`` may be absent. Every entity needs a
    unique string ``id`` within its collection, and domain ids must be
    unique across the whole tree.

    Raises:
        ValidationFailure: With pydantic's error list in ``errors``.
    """
    if isinstance(payload, Snapshot):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationFailure("Snapshot payload must be a JSON object")
    try:
        return Snapshot.model_validate(dict(payload))
    except ValidationError as exc:
        errors = json.loads(exc.json(include_url=False))
        raise ValidationFailure(
            f"Malformed snapshot payload ({exc.error_count()} errors)", errors=errors
        ) from exc
