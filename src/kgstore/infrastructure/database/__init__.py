"""Embedded SQLite store: handle, schema, row-level persistence, migrations."""

from kgstore.infrastructure.database.engine import StoreHandle
from kgstore.infrastructure.database.entities import COLLECTIONS, EntityCollection
from kgstore.infrastructure.database.schema import (
    ENTITY_TABLES,
    SCOPED_TABLES,
    artifacts,
    domains,
    experts,
    graph_metadata,
    graphs,
    initiatives,
    metadata,
    modules,
)

__all__ = [
    "COLLECTIONS",
    "ENTITY_TABLES",
    "SCOPED_TABLES",
    "EntityCollection",
    "StoreHandle",
    "artifacts",
    "domains",
    "experts",
    "graph_metadata",
    "graphs",
    "initiatives",
    "metadata",
    "modules",
]
