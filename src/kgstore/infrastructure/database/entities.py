"""Ordered storage of opaque entity payloads.

Each collection kind (modules, artifacts, initiatives, experts) lives in
its own table of ``(graph_id, id, position, data)`` rows. The store knows
nothing about payload fields except the id, which it obtains through a
caller-supplied function. References between payloads (a module's
dependencies, an artifact's producer) are not checked here.

The caller owns the transaction: pass a ``Connection`` obtained from
:meth:`StoreHandle.transaction` so the rewrite is atomic with the rest of
the snapshot.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from operator import itemgetter
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import delete, func, insert, select

from kgstore.domain.types import CollectionKind
from kgstore.infrastructure.database.schema import ENTITY_TABLES

if TYPE_CHECKING:
    from sqlalchemy import Connection, Table

T = TypeVar("T")

Payload = dict[str, Any]


def _dump_json(item: Payload) -> str:
    return json.dumps(item, ensure_ascii=False, separators=(",", ":"))


class EntityCollection(Generic[T]):
    """Order-preserving store for one collection kind.

    Args:
        kind: Which collection this instance serves.
        id_of: Extracts the stable id of an item.
        dump: Serializes an item to the stored text.
        load: Inverse of *dump*.
    """

    def __init__(
        self,
        kind: CollectionKind,
        *,
        id_of: Callable[[T], str],
        dump: Callable[[T], str],
        load: Callable[[str], T],
    ) -> None:
        self.kind = kind
        self.table: Table = ENTITY_TABLES[kind]
        self._id_of = id_of
        self._dump = dump
        self._load = load

    def write(self, conn: Connection, graph_id: str, items: Sequence[T]) -> int:
        """Replace every ``(graph_id, kind)`` row with *items*, in order.

        Returns the number of rows written.
        """
        conn.execute(delete(self.table).where(self.table.c.graph_id == graph_id))
        if not items:
            return 0
        conn.execute(
            insert(self.table),
            [
                {
                    "graph_id": graph_id,
                    "id": self._id_of(item),
                    "position": index,
                    "data": self._dump(item),
                }
                for index, item in enumerate(items)
            ],
        )
        return len(items)

    def read(self, conn: Connection, graph_id: str) -> list[T]:
        """Return the stored items in their original write order."""
        rows = conn.execute(
            select(self.table.c.data)
            .where(self.table.c.graph_id == graph_id)
            .order_by(self.table.c.position)
        ).all()
        return [self._load(row.data) for row in rows]

    def count(self, conn: Connection, graph_id: str) -> int:
        """Number of stored items for *graph_id*."""
        result = conn.execute(
            select(func.count()).select_from(self.table).where(self.table.c.graph_id == graph_id)
        ).scalar_one()
        return int(result)


def json_collection(kind: CollectionKind) -> EntityCollection[Payload]:
    """Collection of plain JSON objects identified by their ``id`` key."""
    return EntityCollection(kind, id_of=itemgetter("id"), dump=_dump_json, load=json.loads)


COLLECTIONS: dict[CollectionKind, EntityCollection[Payload]] = {
    kind: json_collection(kind) for kind in CollectionKind
}
