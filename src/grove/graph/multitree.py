"""Multitree - arena of task nodes with id-based adjacency.

This module provides the in-memory structure for one loaded component:
- Multitree: arena of TaskNode records plus parent/child id lists
- NodeRef: a handle (arena, id) exposing the per-node API

Nodes never reference each other directly. Adjacency is kept as two
mirrored tables of integer ids, which makes copying a structure for
simulation a matter of copying small lists.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, Iterator

from grove.graph.node import TaskNode, TaskStatus
from grove.graph.traverse import SearchState, depth_first_search
from grove.graph.traverse import walk as walk_ids


class LinkExistsError(ValueError):
    """Raised when adding a link that is already present."""


class LinkNotFoundError(ValueError):
    """Raised when removing a link that is not present."""


class Multitree:
    """Arena holding one or more loaded components.

    The arena itself does not enforce the multitree invariants; it only
    keeps the two adjacency sides consistent. Structural validation lives
    in grove.graph.validate.
    """

    def __init__(self) -> None:
        self._nodes: dict[int, TaskNode] = {}
        self._children: dict[int, list[int]] = {}
        self._parents: dict[int, list[int]] = {}

    @classmethod
    def single(cls, record: TaskNode) -> NodeRef:
        """Create an arena holding one unlinked node and return its handle."""
        tree = cls()
        return tree.add(record)

    # Record access

    def add(self, record: TaskNode) -> NodeRef:
        """Add an unlinked record to the arena.

        Raises:
            ValueError: If a node with the same id is already present.
        """
        if record.id in self._nodes:
            raise ValueError(f"Node {record.id} already exists")
        self._nodes[record.id] = record
        self._children[record.id] = []
        self._parents[record.id] = []
        return NodeRef(self, record.id)

    def record(self, node_id: int) -> TaskNode:
        """Return the record for node_id (KeyError if absent)."""
        try:
            return self._nodes[node_id]
        except KeyError:
            raise KeyError(f"Node '{node_id}' not found") from None

    def node(self, node_id: int) -> NodeRef:
        """Return a handle for node_id (KeyError if absent)."""
        self.record(node_id)
        return NodeRef(self, node_id)

    def get(self, node_id: int) -> NodeRef | None:
        """Return a handle for node_id, or None."""
        if node_id in self._nodes:
            return NodeRef(self, node_id)
        return None

    def get_by_name(self, name: str) -> NodeRef | None:
        """Return the lowest-id node with the given name, or None."""
        for node_id in self.ids():
            if self._nodes[node_id].name == name:
                return NodeRef(self, node_id)
        return None

    def get_by_alias(self, alias: str) -> NodeRef | None:
        """Return the node with the given alias, or None."""
        for node_id in self.ids():
            if self._nodes[node_id].alias == alias:
                return NodeRef(self, node_id)
        return None

    def ids(self) -> list[int]:
        """Return all node ids in the arena, ascending."""
        return sorted(self._nodes)

    def nodes(self) -> list[NodeRef]:
        """Return handles for every node in the arena, by ascending id."""
        return [NodeRef(self, node_id) for node_id in self.ids()]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def next_id(self) -> int:
        """Return one more than the highest id in the arena."""
        return max(self._nodes, default=0) + 1

    # Adjacency

    def child_ids(self, node_id: int) -> tuple[int, ...]:
        """Return ids of direct children in insertion order."""
        return tuple(self._children[node_id])

    def parent_ids(self, node_id: int) -> tuple[int, ...]:
        """Return ids of direct parents in insertion order."""
        return tuple(self._parents[node_id])

    def has_link(self, origin_id: int, dest_id: int) -> bool:
        """Check whether origin -> dest exists."""
        return dest_id in self._children.get(origin_id, ())

    def connect(self, origin_id: int, dest_id: int) -> None:
        """Add origin -> dest on both adjacency sides.

        No structural validation is performed beyond self links and
        duplicates; either both sides change or neither does.

        Raises:
            KeyError: If either endpoint is not in the arena.
            ValueError: For a self link.
            LinkExistsError: If the link already exists.
        """
        self.record(origin_id)
        self.record(dest_id)
        if origin_id == dest_id:
            raise ValueError("loops are not allowed")
        if self.has_link(origin_id, dest_id):
            raise LinkExistsError("link already exists")
        self._children[origin_id].append(dest_id)
        self._parents[dest_id].append(origin_id)

    def disconnect(self, origin_id: int, dest_id: int) -> None:
        """Remove origin -> dest from both adjacency sides.

        Raises:
            LinkNotFoundError: If the link does not exist.
        """
        if not self.has_link(origin_id, dest_id):
            raise LinkNotFoundError(f"link ({origin_id}) -> ({dest_id}) does not exist")
        self._children[origin_id].remove(dest_id)
        self._parents[dest_id].remove(origin_id)

    def remove(self, node_id: int) -> TaskNode:
        """Drop a node and every link touching it; return its record."""
        record = self.record(node_id)
        for parent_id in self.parent_ids(node_id):
            self.disconnect(parent_id, node_id)
        for child_id in self.child_ids(node_id):
            self.disconnect(node_id, child_id)
        del self._nodes[node_id]
        del self._children[node_id]
        del self._parents[node_id]
        return record

    def edges(self) -> list[tuple[int, int]]:
        """Return every (origin, dest) pair, sorted."""
        return sorted(
            (origin, dest) for origin, children in self._children.items() for dest in children
        )

    # Copies

    def copy(self) -> Multitree:
        """Return an independent copy of records and adjacency tables."""
        clone = Multitree()
        clone._nodes = {node_id: record.copy() for node_id, record in self._nodes.items()}
        clone._children = {node_id: list(ids) for node_id, ids in self._children.items()}
        clone._parents = {node_id: list(ids) for node_id, ids in self._parents.items()}
        return clone

    def absorb(self, other: Multitree) -> None:
        """Move every node and link of other into this arena.

        Nodes already present (same id) are kept; their links from other
        are merged in.
        """
        for node_id, record in other._nodes.items():
            if node_id not in self._nodes:
                self.add(record)
        for origin, dest in other.edges():
            if not self.has_link(origin, dest):
                self.connect(origin, dest)

    def tree(self, root_id: int) -> Multitree:
        """Return the tree induced by following children from root_id.

        Each node in the result has exactly one parent (the first one
        discovered), so shared descendants appear once.
        """
        result = Multitree()
        result.add(self.record(root_id).copy())
        queue: deque[int] = deque([root_id])
        while queue:
            current = queue.popleft()
            for child_id in self._children[current]:
                if child_id in result:
                    continue
                result.add(self.record(child_id).copy())
                result.connect(current, child_id)
                queue.append(child_id)
        return result

    def component_ids(self, node_id: int) -> list[int]:
        """Return ids reachable from node_id in either direction, ascending."""
        found: list[int] = []

        def collect(current: int, state: SearchState) -> None:
            if state == SearchState.WHITE:
                found.append(current)

        depth_first_search(self, node_id, collect, directed=False)
        return sorted(found)

    def root_ids(self, ids: Iterable[int] | None = None) -> list[int]:
        """Return ids with no parents among ids (default: the whole arena)."""
        candidates = self.ids() if ids is None else sorted(ids)
        return [node_id for node_id in candidates if not self._parents[node_id]]


class NodeRef:
    """Handle for one node of a Multitree.

    Equality is identity of (arena, id); two handles to the same node in
    the same arena compare equal.
    """

    __slots__ = ("tree", "id")

    def __init__(self, tree: Multitree, node_id: int) -> None:
        self.tree = tree
        self.id = node_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeRef):
            return NotImplemented
        return self.tree is other.tree and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"NodeRef(id={self.id}, name={self.name!r})"

    # Record fields

    @property
    def record(self) -> TaskNode:
        return self.tree.record(self.id)

    @property
    def name(self) -> str:
        return self.record.name

    @name.setter
    def name(self, value: str) -> None:
        self.record.name = value

    @property
    def alias(self) -> str | None:
        return self.record.alias

    @alias.setter
    def alias(self, value: str | None) -> None:
        self.record.alias = value

    @property
    def created_at(self) -> int:
        return self.record.created_at

    @property
    def completed_at(self) -> int | None:
        return self.record.completed_at

    @completed_at.setter
    def completed_at(self, value: int | None) -> None:
        self.record.completed_at = value

    # Adjacency views

    @property
    def children(self) -> tuple[NodeRef, ...]:
        """Direct children, read-only, in insertion order."""
        return tuple(NodeRef(self.tree, i) for i in self.tree.child_ids(self.id))

    @property
    def parents(self) -> tuple[NodeRef, ...]:
        """Direct parents, read-only, in insertion order."""
        return tuple(NodeRef(self.tree, i) for i in self.tree.parent_ids(self.id))

    def child_count(self) -> int:
        return len(self.tree.child_ids(self.id))

    def parent_count(self) -> int:
        return len(self.tree.parent_ids(self.id))

    def has_child(self, node: NodeRef) -> bool:
        return self.tree.has_link(self.id, node.id)

    def has_parent(self, node: NodeRef) -> bool:
        return self.tree.has_link(node.id, self.id)

    @property
    def is_root(self) -> bool:
        """True if this node has no parents."""
        return self.parent_count() == 0

    @property
    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return self.child_count() == 0

    @property
    def is_date_node(self) -> bool:
        """True for a root whose name is a calendar date."""
        return self.is_root and self.record.has_date_name

    # Mutators (both sides change in one call, or nothing changes)

    def _check_same_tree(self, other: NodeRef) -> None:
        if other.tree is not self.tree:
            raise ValueError("nodes belong to different arenas")

    def add_child(self, child: NodeRef) -> None:
        """Register child under this node and this node above child."""
        self._check_same_tree(child)
        self.tree.connect(self.id, child.id)

    def add_parent(self, parent: NodeRef) -> None:
        """Register parent above this node and this node under parent."""
        self._check_same_tree(parent)
        self.tree.connect(parent.id, self.id)

    def remove_child(self, child: NodeRef) -> None:
        self._check_same_tree(child)
        self.tree.disconnect(self.id, child.id)

    def remove_parent(self, parent: NodeRef) -> None:
        self._check_same_tree(parent)
        self.tree.disconnect(parent.id, self.id)

    # Derived sets

    def walk(self, order: str = "pre") -> Iterator[NodeRef]:
        """Iterate over this node and its descendants, each once."""
        for node_id in walk_ids(self.tree, self.id, order):
            yield NodeRef(self.tree, node_id)

    def descendants(self) -> list[NodeRef]:
        """Return every node reachable through children, each once."""
        return list(self.walk("pre"))[1:]

    def ancestors(self) -> list[NodeRef]:
        """Return every node reachable through parents, each once.

        For DAG structures, visits each unique ancestor once.
        """
        visited: set[int] = set()
        result: list[NodeRef] = []
        stack = list(reversed(self.tree.parent_ids(self.id)))
        while stack:
            node_id = stack.pop()
            if node_id in visited:
                continue
            visited.add(node_id)
            result.append(NodeRef(self.tree, node_id))
            stack.extend(reversed(self.tree.parent_ids(node_id)))
        return result

    def all(self) -> list[NodeRef]:
        """Return the whole connected component, sorted by id."""
        return [NodeRef(self.tree, i) for i in self.tree.component_ids(self.id)]

    def roots(self) -> list[NodeRef]:
        """Return the roots above this node (itself if it is a root)."""
        found = [n for n in [self, *self.ancestors()] if n.is_root]
        return sorted(found, key=lambda n: n.id)

    def roots_all(self) -> list[NodeRef]:
        """Return every root of the component, sorted by id."""
        return [n for n in self.all() if n.is_root]

    def leaves(self) -> list[NodeRef]:
        """Return the leaves below this node (itself if it is a leaf)."""
        return sorted((n for n in self.walk() if n.is_leaf), key=lambda n: n.id)

    def leaves_all(self) -> list[NodeRef]:
        """Return every leaf of the component, sorted by id."""
        return [n for n in self.all() if n.is_leaf]

    def get(self, node_id: int) -> NodeRef | None:
        """Return a node of this component by id, or None."""
        node = self.tree.get(node_id)
        if node is None or node_id not in self.tree.component_ids(self.id):
            return None
        return node

    # Status

    @property
    def is_completed(self) -> bool:
        return self.record.is_completed

    @property
    def is_in_progress(self) -> bool:
        if self.is_completed:
            return False
        return any(d.is_completed for d in self.descendants())

    @property
    def is_inactive(self) -> bool:
        return not self.is_completed and not self.is_in_progress

    def status(self) -> TaskStatus:
        """Return the derived status of this node."""
        if self.is_completed:
            return TaskStatus.COMPLETED
        if self.is_in_progress:
            return TaskStatus.IN_PROGRESS
        return TaskStatus.INACTIVE

    # Copies

    def deep_copy(self) -> NodeRef:
        """Return this node as part of an independent copy of its arena."""
        return self.tree.copy().node(self.id)

    def induced_tree(self) -> NodeRef:
        """Return this node as the root of its induced tree copy."""
        return self.tree.tree(self.id).node(self.id)
