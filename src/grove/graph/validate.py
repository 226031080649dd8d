"""
Structural validation for new links.

A proposed link is checked against a simulated copy of the structure:
the adjacency tables of both endpoints' components are copied, the link
is attached to the copy, and two depth-first checks run on the result:

- Cycle check: stepping onto a GRAY (in-progress) node is a back edge.
- Diamond check: stepping onto a BLACK (finished) node means a second
  path to it exists from the current root.

The real arena is only touched after both checks pass.
"""

from __future__ import annotations

from grove.errors import Forbidden, NotFound
from grove.graph.multitree import Multitree, NodeRef
from grove.graph.names import (
    is_date_name,
    validate_alias,
    validate_date_node_name,
    validate_node_name,
)
from grove.graph.traverse import SearchState, depth_first_search

__all__ = [
    "has_cycle",
    "has_diamond",
    "link_nodes",
    "unlink_nodes",
    "validate_alias",
    "validate_date_node_name",
    "validate_new_link",
    "validate_node_name",
]


def _search_roots(tree: Multitree, node_id: int) -> list[int]:
    """Roots of the component containing node_id, or node_id if cyclic."""
    roots = tree.root_ids(tree.component_ids(node_id))
    return roots or [node_id]


def has_cycle(tree: Multitree, node_id: int) -> bool:
    """Check the component containing node_id for a directed cycle.

    Searches from every root; nodes the roots cannot reach are used as
    additional starting points so that no part of the component escapes.
    """
    component = tree.component_ids(node_id)
    reached: set[int] = set()

    def visit(current: int, state: SearchState) -> bool:
        reached.add(current)
        return state == SearchState.GRAY

    for start in _search_roots(tree, node_id) + component:
        if start in reached:
            continue
        if depth_first_search(tree, start, visit):
            return True
    return False


def has_diamond(tree: Multitree, node_id: int) -> bool:
    """Check the (acyclic) component containing node_id for a diamond.

    Raises:
        ValueError: If the component has no root (it is cyclic).
    """
    roots = tree.root_ids(tree.component_ids(node_id))
    if not roots:
        raise ValueError("cyclic graph passed to has_diamond")

    def visit(_current: int, state: SearchState) -> bool:
        return state == SearchState.BLACK

    return any(depth_first_search(tree, root, visit) for root in roots)


def _simulate(origin: NodeRef, dest: NodeRef) -> Multitree:
    """Copy both components into one arena and attach origin -> dest."""
    simulated = origin.tree.copy()
    if dest.tree is not origin.tree:
        simulated.absorb(dest.tree.copy())
    simulated.connect(origin.id, dest.id)
    return simulated


def validate_new_link(origin: NodeRef, dest: NodeRef) -> None:
    """Check whether origin -> dest keeps the structure a multitree.

    Args:
        origin: The prospective parent, as loaded with its component.
        dest: The prospective child, as loaded with its component.

    Raises:
        Forbidden: For a self link, a duplicate link, a date-node
            destination, or a link that would form a cycle or diamond.
        ValueError: If either endpoint is not persisted.
    """
    if origin.id == 0 or dest.id == 0:
        raise ValueError("link endpoints must have IDs")
    if origin.id == dest.id:
        raise Forbidden("loops are not allowed")
    if origin.has_child(dest):
        raise Forbidden("link already exists")
    if is_date_name(dest.name):
        raise Forbidden("cannot unroot date node")

    simulated = _simulate(origin, dest)
    if has_cycle(simulated, origin.id):
        raise Forbidden("cycles are not allowed")
    if has_diamond(simulated, origin.id):
        raise Forbidden("diamonds are not allowed")


def link_nodes(origin: NodeRef, dest: NodeRef) -> NodeRef:
    """Validate and create origin -> dest.

    If dest was loaded into a separate arena, its component is merged
    into origin's arena. Nothing changes unless validation passes.

    Returns:
        The destination as a member of origin's arena.
    """
    validate_new_link(origin, dest)
    if dest.tree is not origin.tree:
        origin.tree.absorb(dest.tree)
    target = origin.tree.node(dest.id)
    origin.add_child(target)
    return target


def unlink_nodes(origin: NodeRef, dest: NodeRef) -> None:
    """Remove an existing origin -> dest link.

    Raises:
        NotFound: If the link does not exist.
    """
    if dest.tree is not origin.tree or not origin.has_child(dest):
        raise NotFound(f"link ({origin.id}) -> ({dest.id}) does not exist")
    origin.remove_child(dest)
