"""Depth-first search over a Multitree arena.

The search reports every step forward together with the search state of
the node it arrives at, which is what the structural checks in
grove.graph.validate are built on:

- WHITE: undiscovered (first arrival)
- GRAY: discovered, not finished (arrival here closes a cycle)
- BLACK: finished (arrival here means a second path exists)
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterator

if TYPE_CHECKING:
    from grove.graph.multitree import Multitree


class SearchState(Enum):
    """Colour of a node during depth-first search."""

    WHITE = 0
    GRAY = 1
    BLACK = 2


Visitor = Callable[[int, SearchState], "bool | None"]


def depth_first_search(
    tree: Multitree,
    start: int,
    visit: Visitor,
    directed: bool = True,
) -> bool:
    """Traverse the arena from start, calling visit on each step forward.

    The visitor receives the id of the node being stepped onto and that
    node's state before the step. Returning True stops the search.

    Args:
        tree: The arena to search.
        start: Id of the starting node.
        visit: Callback ``visit(node_id, state) -> bool | None``.
        directed: Follow only child links if True, else parents and children.

    Returns:
        True if the visitor stopped the search early.
    """
    state: dict[int, SearchState] = {}

    def neighbors(node_id: int) -> Iterator[int]:
        if not directed:
            yield from tree.parent_ids(node_id)
        yield from tree.child_ids(node_id)

    if visit(start, SearchState.WHITE):
        return True
    state[start] = SearchState.GRAY
    stack: list[tuple[int, Iterator[int]]] = [(start, neighbors(start))]

    while stack:
        current, pending = stack[-1]
        advanced = False
        for nxt in pending:
            seen = state.get(nxt, SearchState.WHITE)
            if visit(nxt, seen):
                return True
            if seen == SearchState.WHITE:
                state[nxt] = SearchState.GRAY
                stack.append((nxt, neighbors(nxt)))
                advanced = True
                break
        if not advanced:
            state[current] = SearchState.BLACK
            stack.pop()

    return False


def walk(tree: Multitree, start: int, order: str = "pre") -> Iterator[int]:
    """Iterate ids of start and its descendants, once each.

    Args:
        tree: The arena to walk.
        start: Id of the first node.
        order: "pre" (parent first) or "post" (children first).

    Yields:
        Node ids in the requested order.
    """
    if order not in ("pre", "post"):
        raise ValueError(f"Unknown traversal order: {order}")

    seen: set[int] = {start}
    if order == "pre":
        yield start
    stack: list[tuple[int, Iterator[int]]] = [(start, iter(tree.child_ids(start)))]
    while stack:
        current, pending = stack[-1]
        for child in pending:
            if child in seen:
                continue
            seen.add(child)
            if order == "pre":
                yield child
            stack.append((child, iter(tree.child_ids(child))))
            break
        else:
            stack.pop()
            if order == "post":
                yield current
