"""Domain tree transcoding between the recursive model and flat rows.

The domain taxonomy is a forest of :class:`DomainNode` objects. In the
database each node is one row carrying its ``parent_id`` and its
zero-based ``position`` among siblings. :func:`flatten` and
:func:`rebuild` convert between the two shapes.

INVARIANT: ``rebuild(flatten(tree)) == tree``. Sibling order is carried
by ``position``, so it survives the round trip exactly.

Rebuild is lenient: rows whose parent does not exist, and rows that can
only be reached through a cycle, are dropped rather than raising. A
hand-edited database must still load.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from kgstore.domain.snapshot import DomainNode

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@dataclass(frozen=True)
class DomainRow:
    """One flattened domain node."""

    id: str
    name: str
    description: str | None
    parent_id: str | None
    position: int
    attributes: dict[str, Any] | None = None


def flatten(tree: Sequence[DomainNode], parent_id: str | None = None) -> list[DomainRow]:
    """Flatten *tree* into rows in depth-first pre-order.

    Each node's row precedes the rows of its children, so a parent is
    always inserted before anything that points at it.
    """
    rows: list[DomainRow] = []
    for index, node in enumerate(tree):
        rows.append(
            DomainRow(
                id=node.id,
                name=node.name,
                description=node.description,
                parent_id=parent_id,
                position=index,
                attributes=node.attributes or None,
            )
        )
        if node.children:
            rows.extend(flatten(node.children, node.id))
    return rows


def rebuild(rows: Iterable[DomainRow]) -> list[DomainNode]:
    """Rebuild the domain forest from flat *rows*.

    Rows are grouped by ``parent_id`` and each group is ordered by
    ``position``. Materialization starts from the root group
    (``parent_id is None``); anything unreachable from it is dropped.
    A node gets ``children`` only when it has at least one child.
    """
    groups: dict[str | None, list[DomainRow]] = defaultdict(list)
    for row in rows:
        groups[row.parent_id].append(row)
    for group in groups.values():
        group.sort(key=lambda r: r.position)

    visited: set[str] = set()

    def build(parent_id: str | None) -> list[DomainNode]:
        nodes: list[DomainNode] = []
        for row in groups.get(parent_id, ()):
            if row.id in visited:
                continue
            visited.add(row.id)
            children = build(row.id)
            nodes.append(
                DomainNode.model_validate(
                    {
                        **(row.attributes or {}),
                        "id": row.id,
                        "name": row.name,
                        "description": row.description,
                        "children": children or None,
                    }
                )
            )
        return nodes

    return build(None)


def iter_domain_ids(tree: Sequence[DomainNode]) -> list[str]:
    """Return every domain id in *tree*, in pre-order."""
    return [row.id for row in flatten(tree)]
