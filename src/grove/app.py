"""
grove.app - Operations on the task graph.

Every public method of App is one logical operation and runs in exactly
one database transaction: resolve selectors, load the affected
component, validate or mutate it in memory, propagate completion, write
the changed rows, commit. Any exception rolls the whole operation back.

Date nodes are managed here: they are created on first use as a parent
and deleted as soon as they lose their last child.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from grove.config import GroveConfig
from grove.db import (
    Database,
    delete_link,
    delete_node,
    get_link,
    get_node,
    get_node_by_alias,
    get_node_by_name,
    get_roots,
    insert_link,
    insert_node,
    load_component,
    update_alias,
    update_completion,
    update_name,
)
from grove.errors import Forbidden, NotFound
from grove.graph.multitree import Multitree, NodeRef
from grove.graph.names import DATE_FORMAT, is_date_name
from grove.graph.node import Link, TaskNode, TaskStatus
from grove.graph.status import force_completion, propagate
from grove.graph.validate import (
    link_nodes,
    unlink_nodes,
    validate_alias,
    validate_node_name,
)
from grove.selectors import ById, ByName, Selector, parse_selector

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


@dataclass
class NodeStat:
    """Summary of one node as shown by `grove stat`."""

    node: NodeRef
    status: TaskStatus
    completed_leaves: int
    total_leaves: int

    @property
    def parent_count(self) -> int:
        return self.node.parent_count()

    @property
    def child_count(self) -> int:
        return self.node.child_count()


class App:
    """Transaction coordinator for all graph operations.

    Args:
        config: Resolved settings (database location, day start).
        clock: Returns the current Unix time; injectable for tests.
    """

    def __init__(self, config: GroveConfig, clock: Clock | None = None) -> None:
        self.config = config
        self.clock = clock or system_clock
        self.db = Database(config.database_path, timeout=config.timeout)

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> App:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def today(self) -> str:
        """Name of today's date node, honouring display.day_start."""
        moment = datetime.fromtimestamp(self.clock()) - timedelta(hours=self.config.day_start)
        return moment.strftime(DATE_FORMAT)

    # Selector resolution

    def _lookup(self, conn: sqlite3.Connection, selector: Selector) -> TaskNode | None:
        if isinstance(selector, ById):
            return get_node(conn, selector.id)
        if isinstance(selector, ByName):
            return get_node_by_name(conn, selector.name)
        return get_node_by_alias(conn, selector.alias)

    def _require(self, conn: sqlite3.Connection, selector: Selector) -> TaskNode:
        record = self._lookup(conn, selector)
        if record is None:
            raise NotFound(f"node {selector} does not exist")
        return record

    def _require_parent(self, conn: sqlite3.Connection, selector: Selector) -> TaskNode:
        """Resolve a parent selector, creating a missing date node."""
        record = self._lookup(conn, selector)
        if record is not None:
            return record
        if isinstance(selector, ByName):
            node_id = insert_node(conn, selector.name, created_at=self.clock())
            logger.debug("created date node %s (%d)", selector.name, node_id)
            return self._require(conn, ById(node_id))
        raise NotFound(f"predecessor {selector} does not exist")

    def _load(self, conn: sqlite3.Connection, node_id: int) -> NodeRef:
        loaded = load_component(conn, node_id)
        if loaded is None:
            raise NotFound(f"node ({node_id}) does not exist")
        return loaded[1]

    # Completion bookkeeping

    @staticmethod
    def _snapshot(tree: Multitree) -> dict[int, int | None]:
        return {node.id: node.completed_at for node in tree.nodes()}

    @staticmethod
    def _write_completion(
        conn: sqlite3.Connection, tree: Multitree, before: dict[int, int | None]
    ) -> None:
        for node in tree.nodes():
            if node.id in before and before[node.id] != node.completed_at:
                update_completion(conn, node.id, node.completed_at)

    def _drop_if_empty_date_node(self, conn: sqlite3.Connection, node: NodeRef) -> bool:
        if node.is_date_node and node.is_leaf:
            logger.debug("deleting empty date node %s", node.name)
            delete_node(conn, node.id)
            node.tree.remove(node.id)
            return True
        return False

    # Creating nodes

    def add_root(self, name: str) -> NodeRef:
        """Create a new root node."""
        validate_node_name(name)
        with self.db.transaction() as conn:
            node_id = insert_node(conn, name, created_at=self.clock())
            return self._load(conn, node_id)

    def add_child(self, name: str, parent: str | int | Selector) -> NodeRef:
        """Create a node under parent.

        A date selector for a date node that does not exist yet creates it.
        """
        validate_node_name(name)
        parent_selector = parse_selector(parent)
        with self.db.transaction() as conn:
            parent_record = self._require_parent(conn, parent_selector)
            node_id = insert_node(conn, name, created_at=self.clock())
            insert_link(conn, parent_record.id, node_id)

            node = self._load(conn, node_id)
            before = self._snapshot(node.tree)
            propagate(node.tree, [parent_record.id])
            self._write_completion(conn, node.tree, before)
            return node

    def add_tree(self, skeleton: NodeRef, parent: str | int | Selector | None = None) -> NodeRef:
        """Store an imported tree, optionally under parent.

        Args:
            skeleton: Root of an unsaved tree (see grove.graph.importer).
            parent: Where to attach it; None makes it a root.

        Returns:
            The stored root as a member of its loaded component.
        """
        members = list(skeleton.walk("pre"))
        for member in members:
            validate_node_name(member.name)
        parent_selector = parse_selector(parent) if parent is not None else None

        with self.db.transaction() as conn:
            parent_record = None
            if parent_selector is not None:
                parent_record = self._require_parent(conn, parent_selector)

            now = self.clock()
            new_ids: dict[int, int] = {}
            for member in members:
                new_ids[member.id] = insert_node(conn, member.name, created_at=now)
            for member in members:
                for child in member.children:
                    insert_link(conn, new_ids[member.id], new_ids[child.id])

            root_id = new_ids[skeleton.id]
            if parent_record is not None:
                insert_link(conn, parent_record.id, root_id)

            node = self._load(conn, root_id)
            if parent_record is not None:
                before = self._snapshot(node.tree)
                propagate(node.tree, [parent_record.id])
                self._write_completion(conn, node.tree, before)
            logger.debug("imported %d nodes under (%d)", len(members), root_id)
            return node

    # Editing nodes

    def rename(self, selector: str | int | Selector, name: str) -> None:
        """Rename a node. Date nodes keep their names."""
        validate_node_name(name)
        target = parse_selector(selector)
        with self.db.transaction() as conn:
            record = self._require(conn, target)
            if record.has_date_name:
                raise Forbidden("cannot rename date node")
            update_name(conn, record.id, name)

    def set_alias(self, selector: str | int | Selector, alias: str | None) -> None:
        """Set (or with None, clear) the alias of a node."""
        if alias is not None:
            validate_alias(alias)
        target = parse_selector(selector)
        with self.db.transaction() as conn:
            record = self._require(conn, target)
            if alias is not None:
                holder = get_node_by_alias(conn, alias)
                if holder is not None and holder.id != record.id:
                    raise Forbidden(f"alias {alias} is already in use by ({holder.id})")
            update_alias(conn, record.id, alias)

    # Links

    def link(self, origin: str | int | Selector, dest: str | int | Selector) -> Link:
        """Create origin -> dest.

        A date selector for origin creates the date node if needed.

        Returns:
            The stored link.
        """
        origin_selector = parse_selector(origin)
        dest_selector = parse_selector(dest)
        with self.db.transaction() as conn:
            dest_record = self._require(conn, dest_selector)
            origin_record = self._require_parent(conn, origin_selector)

            origin_node = self._load(conn, origin_record.id)
            dest_node = origin_node.tree.get(dest_record.id) or self._load(conn, dest_record.id)
            target = link_nodes(origin_node, dest_node)
            insert_link(conn, origin_node.id, target.id)

            before = self._snapshot(origin_node.tree)
            propagate(origin_node.tree, [origin_node.id])
            self._write_completion(conn, origin_node.tree, before)
            return get_link(conn, origin_node.id, target.id)

    def unlink(self, origin: str | int | Selector, dest: str | int | Selector) -> None:
        """Remove origin -> dest; an emptied date node is deleted."""
        origin_selector = parse_selector(origin)
        dest_selector = parse_selector(dest)
        with self.db.transaction() as conn:
            origin_record = self._require(conn, origin_selector)
            dest_record = self._require(conn, dest_selector)

            origin_node = self._load(conn, origin_record.id)
            dest_node = origin_node.tree.get(dest_record.id) or self._load(conn, dest_record.id)
            unlink_nodes(origin_node, dest_node)
            delete_link(conn, origin_node.id, dest_node.id)

            if self._drop_if_empty_date_node(conn, origin_node):
                return
            before = self._snapshot(origin_node.tree)
            propagate(origin_node.tree, [origin_node.id])
            self._write_completion(conn, origin_node.tree, before)

    # Completion

    def _set_completion(self, selector: str | int | Selector, value: int | None) -> None:
        target = parse_selector(selector)
        with self.db.transaction() as conn:
            record = self._require(conn, target)
            node = self._load(conn, record.id)
            before = self._snapshot(node.tree)

            forced = force_completion(node, value)
            seeds: list[int] = []
            for node_id in forced:
                for parent_id in node.tree.parent_ids(node_id):
                    if parent_id not in seeds:
                        seeds.append(parent_id)
            propagate(node.tree, seeds)
            self._write_completion(conn, node.tree, before)

    def check(self, selector: str | int | Selector) -> None:
        """Mark a node and all of its descendants completed."""
        self._set_completion(selector, self.clock())

    def uncheck(self, selector: str | int | Selector) -> None:
        """Mark a node and all of its descendants not completed."""
        self._set_completion(selector, None)

    # Removing nodes

    def _after_removal(
        self, conn: sqlite3.Connection, tree: Multitree, parent_ids: list[int]
    ) -> None:
        before = self._snapshot(tree)
        seeds = []
        for parent_id in parent_ids:
            if not self._drop_if_empty_date_node(conn, tree.node(parent_id)):
                seeds.append(parent_id)
        propagate(tree, seeds)
        self._write_completion(conn, tree, before)

    def remove(self, selector: str | int | Selector) -> list[NodeRef]:
        """Delete a single node.

        Returns:
            Children that lost their only parent and are now roots.
        """
        target = parse_selector(selector)
        with self.db.transaction() as conn:
            record = self._require(conn, target)
            node = self._load(conn, record.id)
            tree = node.tree
            parent_ids = list(tree.parent_ids(node.id))
            child_ids = list(tree.child_ids(node.id))

            delete_node(conn, node.id)
            tree.remove(node.id)
            self._after_removal(conn, tree, parent_ids)
            return [tree.node(child_id) for child_id in child_ids if tree.node(child_id).is_root]

    def remove_recursive(self, selector: str | int | Selector) -> list[NodeRef]:
        """Delete a node and every descendant reachable only through it.

        A descendant with another parent outside the removed part is only
        detached; it and its own descendants survive.

        Returns:
            The removed nodes, as members of a copy of the component taken
            before removal.
        """
        target = parse_selector(selector)
        with self.db.transaction() as conn:
            record = self._require(conn, target)
            node = self._load(conn, record.id)
            snapshot = node.tree.copy()

            removed = [node.id]
            stack = [node.id]
            while stack:
                current = stack.pop()
                for child_id in node.tree.child_ids(current):
                    # A second parent means the child is shared with the rest
                    # of the graph; within one subtree there is never a second
                    # path.
                    if len(node.tree.parent_ids(child_id)) == 1:
                        removed.append(child_id)
                        stack.append(child_id)

            tree = node.tree
            parent_ids = list(tree.parent_ids(node.id))
            for node_id in removed:
                delete_node(conn, node_id)
                tree.remove(node_id)
            logger.debug("removed %d nodes under (%d)", len(removed), record.id)

            self._after_removal(conn, tree, parent_ids)
            return [snapshot.node(node_id) for node_id in removed]

    # Queries

    def get_graph(self, selector: str | int | Selector) -> NodeRef:
        """Load the component containing a node.

        A valid date name with no stored date node yields a synthetic,
        unsaved date node with id 0.
        """
        target = parse_selector(selector)
        with self.db.transaction() as conn:
            record = self._lookup(conn, target)
            if record is None:
                if isinstance(target, ByName):
                    synthetic = TaskNode(id=0, name=target.name, created_at=self.clock())
                    return Multitree.single(synthetic)
                raise NotFound(f"node {target} does not exist")
            return self._load(conn, record.id)

    def _load_roots(self, date_nodes: bool) -> list[NodeRef]:
        with self.db.transaction() as conn:
            roots = [r for r in get_roots(conn) if is_date_name(r.name) == date_nodes]
            return [self._load(conn, r.id) for r in roots]

    def get_roots(self) -> list[NodeRef]:
        """Return every root that is not a date node, by id."""
        return self._load_roots(date_nodes=False)

    def get_date_nodes(self) -> list[NodeRef]:
        """Return every date node, oldest date first."""
        return sorted(self._load_roots(date_nodes=True), key=lambda n: n.name)

    def stat(self, selector: str | int | Selector) -> NodeStat:
        """Return status and leaf counts for a node."""
        node = self.get_graph(selector)
        leaves = node.induced_tree().leaves()
        done = sum(1 for leaf in leaves if leaf.is_completed)
        return NodeStat(
            node=node,
            status=node.status(),
            completed_leaves=done,
            total_leaves=len(leaves),
        )

