"""Tests for link validation: loops, duplicates, cycles and diamonds."""

import pytest

from grove.errors import Forbidden, NotFound
from grove.graph.multitree import Multitree
from grove.graph.node import TaskNode
from grove.graph.validate import (
    has_cycle,
    has_diamond,
    link_nodes,
    unlink_nodes,
    validate_new_link,
)
from tests.graph_test_helpers import build_tree


class TestStructuralChecks:
    """Tests for the raw cycle and diamond detectors."""

    def test_chain_has_neither(self):
        """A plain chain is a valid multitree."""
        tree = build_tree([(1, 2), (2, 3)])

        assert not has_cycle(tree, 1)
        assert not has_diamond(tree, 1)

    def test_detects_cycle(self):
        """A closed loop is found even when the component has no root."""
        tree = build_tree([(1, 2), (2, 3), (3, 1)])

        assert has_cycle(tree, 2)

    def test_detects_cycle_below_root(self):
        """A cycle hanging below a root is found from the root."""
        tree = build_tree([(1, 2), (2, 3), (3, 4), (4, 2)])

        assert has_cycle(tree, 1)

    def test_detects_diamond(self):
        """Two paths from one root to the same node form a diamond."""
        tree = build_tree([(1, 2), (1, 3), (2, 4), (3, 4)])

        assert has_diamond(tree, 4)

    def test_shared_child_of_two_roots_is_fine(self):
        """Paths from different roots do not count as a diamond."""
        tree = build_tree([(1, 3), (2, 3), (3, 4)])

        assert not has_diamond(tree, 1)

    def test_diamond_check_rejects_cyclic_input(self):
        """has_diamond requires an acyclic component with a root."""
        tree = build_tree([(1, 2), (2, 1)])

        with pytest.raises(ValueError, match="cyclic"):
            has_diamond(tree, 1)


class TestValidateNewLink:
    """Tests for validate_new_link and link_nodes."""

    def test_self_link_forbidden(self):
        """A node cannot be linked to itself."""
        tree = build_tree([], extra=(1,))

        with pytest.raises(Forbidden, match="loops are not allowed"):
            validate_new_link(tree.node(1), tree.node(1))

    def test_closing_cycle_forbidden(self):
        """With A -> B -> C, link(C, A) would close a cycle."""
        tree = build_tree([(1, 2), (2, 3)])

        with pytest.raises(Forbidden, match="cycles are not allowed"):
            link_nodes(tree.node(3), tree.node(1))

        assert tree.edges() == [(1, 2), (2, 3)]

    def test_shortcut_forbidden(self):
        """With A -> B -> C, link(A, C) would create a second path."""
        tree = build_tree([(1, 2), (2, 3)])

        with pytest.raises(Forbidden, match="diamonds are not allowed"):
            link_nodes(tree.node(1), tree.node(3))

        assert tree.edges() == [(1, 2), (2, 3)]

    def test_cross_link_between_roots_allowed(self):
        """With R1 -> S and a separate R2, link(R2, S) succeeds."""
        left = build_tree([(1, 2)])
        right = Multitree.single(TaskNode(id=3, name="r2"))

        target = link_nodes(right, left.node(2))

        assert target.tree is right.tree
        assert right.tree.edges() == [(1, 2), (3, 2)]
        assert [p.id for p in target.parents] == [1, 3]

    def test_duplicate_link_forbidden(self):
        """An existing link cannot be added again."""
        tree = build_tree([(1, 2)])

        with pytest.raises(Forbidden, match="link already exists"):
            validate_new_link(tree.node(1), tree.node(2))

    def test_duplicate_detected_from_separate_copy(self):
        """A destination handle from another arena still sees the existing link."""
        tree = build_tree([(1, 2)])
        dest = tree.node(2).deep_copy()

        with pytest.raises(Forbidden, match="link already exists"):
            validate_new_link(tree.node(1), dest)

    def test_date_node_destination_forbidden(self):
        """A date node must stay a root."""
        tree = Multitree()
        task = tree.add(TaskNode(id=1, name="task"))
        day = tree.add(TaskNode(id=2, name="2024-03-01"))

        with pytest.raises(Forbidden, match="cannot unroot date node"):
            validate_new_link(task, day)

    def test_unpersisted_endpoint_rejected(self):
        """A node with id 0 cannot take part in a link."""
        synthetic = Multitree.single(TaskNode(id=0, name="2024-03-01"))
        other = Multitree.single(TaskNode(id=1, name="task"))

        with pytest.raises(ValueError, match="must have IDs"):
            validate_new_link(synthetic, other)

    def test_diamond_across_components_forbidden(self):
        """Joining two components must not create a second path."""
        tree = build_tree([(1, 2), (1, 3), (4, 3)])

        with pytest.raises(Forbidden, match="diamonds are not allowed"):
            link_nodes(tree.node(2), tree.node(4))

    def test_failed_validation_leaves_separate_arena_alone(self):
        """A rejected link never merges the destination's component."""
        origin = build_tree([(1, 2)])
        dest = build_tree([(3, 4)])
        dest.add(TaskNode(id=5, name="2024-01-01"))

        with pytest.raises(Forbidden):
            link_nodes(origin.node(2), dest.node(5))

        assert origin.ids() == [1, 2]


class TestUnlinkNodes:
    """Tests for unlink_nodes."""

    def test_unlink_existing(self):
        """The link disappears on both sides."""
        tree = build_tree([(1, 2)])

        unlink_nodes(tree.node(1), tree.node(2))

        assert tree.edges() == []
        assert tree.node(2).is_root

    def test_unlink_missing_is_not_found(self):
        """Removing a link that does not exist raises NotFound."""
        tree = build_tree([], extra=(1, 2))

        with pytest.raises(NotFound, match="does not exist"):
            unlink_nodes(tree.node(1), tree.node(2))
