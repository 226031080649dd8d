"""Graph loader - rebuild a connected component from flat rows.

Breadth-first search from the requested node: for each node taken off
the queue, its parents and children are fetched (two indexed queries)
and linked in. A visited map keyed by id makes every node appear once,
however many paths lead to it.
"""

from __future__ import annotations

import logging
import sqlite3
from collections import deque

from grove.db.database import get_children, get_node, get_parents
from grove.graph.multitree import Multitree, NodeRef

logger = logging.getLogger(__name__)


def load_component(conn: sqlite3.Connection, node_id: int) -> tuple[Multitree, NodeRef] | None:
    """Load the whole component containing node_id.

    Args:
        conn: Connection inside an open transaction.
        node_id: Id of the target node.

    Returns:
        (arena, handle of the target node), or None if no such row.
    """
    record = get_node(conn, node_id)
    if record is None:
        return None

    tree = Multitree()
    target = tree.add(record)
    queue: deque[int] = deque([record.id])

    while queue:
        current = queue.popleft()

        for parent in get_parents(conn, current):
            if parent.id not in tree:
                tree.add(parent)
                queue.append(parent.id)
            if not tree.has_link(parent.id, current):
                tree.connect(parent.id, current)

        for child in get_children(conn, current):
            if child.id not in tree:
                tree.add(child)
                queue.append(child.id)
            if not tree.has_link(current, child.id):
                tree.connect(current, child.id)

    logger.debug("loaded component of (%d): %d nodes", node_id, len(tree))
    return tree, target
