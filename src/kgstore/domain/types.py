"""Store-wide constants and classification enums.

The default graph id and the metadata key names are part of the on-disk
format: images written by earlier releases use the same values.
"""

from __future__ import annotations

from enum import StrEnum

DEFAULT_GRAPH_ID = "main"

# Current snapshot format. Version 3 introduced experts as a collection.
SNAPSHOT_VERSION = 3
EXPERTS_SINCE_VERSION = 3


class Scope(StrEnum):
    """Data scopes a partial graph copy can include or leave out."""

    DOMAINS = "domains"
    MODULES = "modules"
    ARTIFACTS = "artifacts"
    EXPERTS = "experts"
    INITIATIVES = "initiatives"


class CollectionKind(StrEnum):
    """Flat entity collections stored as ordered opaque payloads."""

    MODULES = "modules"
    ARTIFACTS = "artifacts"
    INITIATIVES = "initiatives"
    EXPERTS = "experts"


class MetadataKey(StrEnum):
    """Keys of the per-graph ``graph_metadata`` side table."""

    SNAPSHOT_VERSION = "snapshotVersion"
    EXPORTED_AT = "updatedAt"
    LAYOUT = "layout"
