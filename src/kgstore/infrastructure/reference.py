"""Bundled reference dataset.

``kgstore/data/reference_graph.json`` ships with the package. It seeds an
empty default graph and supplies the expert list backfilled into graphs
written before experts were a collection.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any

from kgstore.domain.snapshot import Snapshot, validate_snapshot

DATASET_RESOURCE = "reference_graph.json"


@lru_cache(maxsize=1)
def _dataset_text() -> str:
    resource = resources.files("kgstore") / "data" / DATASET_RESOURCE
    return resource.read_text(encoding="utf-8")


def load_reference_payload() -> dict[str, Any]:
    """Fresh, caller-owned copy of the raw dataset."""
    payload: dict[str, Any] = json.loads(_dataset_text())
    return payload


def reference_snapshot() -> Snapshot:
    """The dataset as a validated snapshot."""
    return validate_snapshot(load_reference_payload())


def reference_experts() -> list[dict[str, Any]]:
    experts: list[dict[str, Any]] = load_reference_payload().get("experts", [])
    return experts
