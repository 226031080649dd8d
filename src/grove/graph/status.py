"""Completion status propagation.

Completion is derived bottom-up: a leaf is completed only if it was
explicitly checked; any other node is completed iff all of its children
are. After a change, parents are recomputed in a saturating upward sweep
until nothing flips anymore.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable

from grove.graph.multitree import Multitree, NodeRef

logger = logging.getLogger(__name__)


def force_completion(node: NodeRef, value: int | None) -> list[int]:
    """Set completed_at on node and every descendant.

    Args:
        node: The explicitly checked or unchecked node.
        value: Completion timestamp, or None to uncheck.

    Returns:
        Ids of all touched nodes (node first).
    """
    touched: list[int] = []
    for current in node.walk("pre"):
        current.completed_at = value
        touched.append(current.id)
    return touched


def seeds_for(node: NodeRef) -> list[int]:
    """Return the parents of every leaf under node, deduplicated."""
    seeds: list[int] = []
    for leaf in node.leaves():
        for parent in leaf.parents:
            if parent.id not in seeds:
                seeds.append(parent.id)
    return seeds


def derived_completion(tree: Multitree, node_id: int) -> int | None:
    """Compute the completion value a non-leaf should carry.

    Returns the latest completion timestamp among the children when all
    of them are completed, else None.
    """
    stamps = [tree.record(child).completed_at for child in tree.child_ids(node_id)]
    if not stamps or any(stamp is None for stamp in stamps):
        return None
    return max(stamps)  # type: ignore[type-var]


def propagate(tree: Multitree, seeds: Iterable[int]) -> list[int]:
    """Recompute completion upwards from seeds until a fixed point.

    Leaves are never recomputed. A node whose completed/not-completed
    value flips is updated and its parents are queued in turn.

    Args:
        tree: The loaded arena to update in place.
        seeds: Ids of nodes whose children may have changed.

    Returns:
        Ids whose completed_at differs from its value before the call,
        in order of first change.
    """
    queue: deque[int] = deque()
    queued: set[int] = set()
    for seed in seeds:
        if seed in tree and seed not in queued:
            queue.append(seed)
            queued.add(seed)

    previous: dict[int, int | None] = {}
    order: list[int] = []

    while queue:
        node_id = queue.popleft()
        queued.discard(node_id)
        if not tree.child_ids(node_id):
            continue

        record = tree.record(node_id)
        value = derived_completion(tree, node_id)
        if (value is None) == (record.completed_at is None):
            continue

        if node_id not in previous:
            previous[node_id] = record.completed_at
            order.append(node_id)
        record.completed_at = value
        logger.debug("node %d %s", node_id, "completed" if value is not None else "reopened")

        for parent_id in tree.parent_ids(node_id):
            if parent_id not in queued:
                queue.append(parent_id)
                queued.add(parent_id)

    return [node_id for node_id in order if tree.record(node_id).completed_at != previous[node_id]]
