"""Layout sanitizing for per-node 2D positions.

A layout is ``{"nodes": {node_id: {"x", "y", "fx"?, "fy"?}}}`` as
produced by the visualization. Before a layout is written, and again
after it is read back, every entry is normalized:

- ``x`` and ``y`` are coerced to floats; if either is missing or not
  finite the whole entry is dropped.
- ``fx`` and ``fy`` (pinned position) are coerced the same way, but a
  bad value drops only that field.

An empty result is reported as ``None``: "no layout" and "empty layout"
are the same state.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

_PINNED_FIELDS = ("fx", "fy")


def _coerce(value: Any) -> float | None:
    """Coerce *value* to a finite float, or None."""
    # Null and booleans are missing positions, never 0 or 1.
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_positions(nodes: Mapping[str, Any] | None) -> dict[str, dict[str, float]] | None:
    """Normalize a ``node_id -> position`` mapping.

    Returns None when nothing valid survives.
    """
    if not isinstance(nodes, Mapping):
        return None

    result: dict[str, dict[str, float]] = {}
    for node_id, position in nodes.items():
        if not isinstance(position, Mapping):
            continue
        x = _coerce(position.get("x"))
        y = _coerce(position.get("y"))
        if x is None or y is None:
            continue
        entry = {"x": x, "y": y}
        for field in _PINNED_FIELDS:
            pinned = _coerce(position.get(field))
            if pinned is not None:
                entry[field] = pinned
        result[str(node_id)] = entry

    return result or None


def normalize_layout(layout: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Normalize a ``{"nodes": {...}}`` layout, or return None."""
    if not isinstance(layout, Mapping):
        return None
    nodes = normalize_positions(layout.get("nodes"))
    if nodes is None:
        return None
    return {"nodes": nodes}


def parse_layout(raw: str | None) -> dict[str, Any] | None:
    """Decode a stored layout blob and re-validate it.

    Undecodable blobs read as no layout.
    """
    if not raw:
        return None
    try:
        decoded = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring undecodable layout blob (%d bytes)", len(raw))
        return None
    return normalize_layout(decoded)


def dump_layout(layout: Mapping[str, Any]) -> str:
    """Serialize an already-normalized layout for storage."""
    return json.dumps(layout, separators=(",", ":"), allow_nan=False)
