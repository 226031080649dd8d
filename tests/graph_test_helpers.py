"""Factories for building in-memory multitrees in tests."""

from __future__ import annotations

from grove.graph.multitree import Multitree
from grove.graph.node import TaskNode


def build_tree(edges: list[tuple[int, int]], extra: tuple[int, ...] = ()) -> Multitree:
    """Build an arena from (origin, dest) pairs.

    Node ids are taken from the edges (plus any ids in extra); each node
    is named "n<id>".
    """
    tree = Multitree()
    ids = sorted({i for edge in edges for i in edge} | set(extra))
    for node_id in ids:
        tree.add(TaskNode(id=node_id, name=f"n{node_id}"))
    for origin, dest in edges:
        tree.connect(origin, dest)
    return tree


def ids(nodes) -> list[int]:
    """Ids of an iterable of NodeRefs, in order."""
    return [n.id for n in nodes]
