"""Tests for App: every operation end to end against a real database."""

import pytest

from grove.errors import Forbidden, InvalidName, InvalidSelector, NotFound


def completed(app, node_id):
    """completed_at of a node as currently stored."""
    return app.get_graph(node_id).completed_at


class TestAddNodes:
    """Tests for add_root, add_child and add_tree."""

    def test_add_root(self, app, clock):
        """A root gets the clock's time as created_at."""
        node = app.add_root("Home")

        assert node.id == 1
        assert node.name == "Home"
        assert node.is_root
        assert node.created_at == clock.now

    def test_add_child_under_id(self, app):
        """add_child links the new node below its parent."""
        root = app.add_root("Home")

        child = app.add_child("Kitchen", root.id)

        assert [p.id for p in child.parents] == [root.id]
        assert [c.name for c in app.get_graph(root.id).children] == ["Kitchen"]

    def test_add_child_creates_date_node(self, app):
        """A date selector creates the date node on first use."""
        child = app.add_child("Buy milk", "2024-03-01")

        day = child.parents[0]
        assert day.name == "2024-03-01"
        assert day.is_date_node
        assert [d.name for d in app.get_date_nodes()] == ["2024-03-01"]

    def test_add_child_reuses_date_node(self, app):
        """A second task for the same day shares the date node."""
        first = app.add_child("one", "2024-03-01")
        second = app.add_child("two", "2024-03-01")

        assert first.parents[0].id == second.parents[0].id
        assert len(app.get_date_nodes()) == 1

    def test_add_child_missing_parent(self, app):
        """A missing id or alias is NotFound, and nothing is stored."""
        with pytest.raises(NotFound, match="predecessor 7 does not exist"):
            app.add_child("orphan", 7)
        with pytest.raises(NotFound, match="predecessor home does not exist"):
            app.add_child("orphan", "home")

        assert app.get_roots() == []

    def test_add_rejects_bad_names(self, app):
        """Empty, over-long and date names are rejected."""
        with pytest.raises(InvalidName):
            app.add_root("")
        with pytest.raises(InvalidName):
            app.add_root("x" * 101)
        with pytest.raises(InvalidName):
            app.add_root("2024-03-01")

    def test_add_child_reopens_completed_parent(self, app):
        """A new, unchecked child makes a completed parent incomplete."""
        root = app.add_root("Home")
        done = app.add_child("Sweep", root.id)
        app.check(done.id)
        assert completed(app, root.id) is not None

        app.add_child("Mop", root.id)

        assert completed(app, root.id) is None

    def test_add_tree(self, app):
        """An imported skeleton is stored with fresh ids and links."""
        from grove.graph.importer import import_nodes

        root = app.add_root("Home")
        app.set_alias(root.id, "home")
        skeleton = import_nodes("House\n\tBedroom\n\t\tDesk\n\tKitchen\n")[0]

        stored = app.add_tree(skeleton, "home")

        assert stored.name == "House"
        assert [p.id for p in stored.parents] == [root.id]
        assert [c.name for c in stored.children] == ["Bedroom", "Kitchen"]
        assert [c.name for c in stored.children[0].children] == ["Desk"]
        assert len(stored.all()) == 5

    def test_add_tree_as_root(self, app):
        """Without a parent the imported tree becomes a root."""
        from grove.graph.importer import import_nodes

        stored = app.add_tree(import_nodes("Solo\n")[0])

        assert stored.is_root
        assert [r.name for r in app.get_roots()] == ["Solo"]


class TestEditNodes:
    """Tests for rename and set_alias."""

    def test_rename(self, app):
        root = app.add_root("Old")

        app.rename(root.id, "New")

        assert app.get_graph(root.id).name == "New"

    def test_rename_date_node_forbidden(self, app):
        """Date nodes keep their names."""
        app.add_child("task", "2024-03-01")

        with pytest.raises(Forbidden, match="cannot rename date node"):
            app.rename("2024-03-01", "Someday")

    def test_rename_to_date_name_rejected(self, app):
        root = app.add_root("Plan")

        with pytest.raises(InvalidName, match="reserved"):
            app.rename(root.id, "2024-03-01")

    def test_alias_selects_node(self, app):
        """An alias can be used wherever an id can."""
        root = app.add_root("Home")

        app.set_alias(root.id, "home")

        assert app.get_graph("home").id == root.id
        assert app.get_graph(root.id).alias == "home"

    def test_alias_must_be_unique(self, app):
        first = app.add_root("A")
        second = app.add_root("B")
        app.set_alias(first.id, "x")

        with pytest.raises(Forbidden, match="already in use"):
            app.set_alias(second.id, "x")

        app.set_alias(first.id, "x")

    def test_unalias(self, app):
        root = app.add_root("Home")
        app.set_alias(root.id, "home")

        app.set_alias("home", None)

        assert app.get_graph(root.id).alias is None
        with pytest.raises(NotFound):
            app.get_graph("home")

    def test_invalid_alias(self, app):
        root = app.add_root("Home")

        with pytest.raises(InvalidName, match="numeric"):
            app.set_alias(root.id, "42")


class TestLinks:
    """Tests for link and unlink."""

    def test_cycle_and_diamond_rejected(self, app):
        """With A -> B -> C, both link(C, A) and link(A, C) fail."""
        a = app.add_root("A")
        b = app.add_child("B", a.id)
        c = app.add_child("C", b.id)

        with pytest.raises(Forbidden, match="cycles are not allowed"):
            app.link(c.id, a.id)
        with pytest.raises(Forbidden, match="diamonds are not allowed"):
            app.link(a.id, c.id)

        assert app.get_graph(a.id).tree.edges() == [(a.id, b.id), (b.id, c.id)]

    def test_cross_link_allowed(self, app):
        """With R1 -> S and a separate R2, link(R2, S) succeeds."""
        r1 = app.add_root("R1")
        s = app.add_child("S", r1.id)
        r2 = app.add_root("R2")

        link = app.link(r2.id, s.id)

        assert (link.origin_id, link.dest_id) == (r2.id, s.id)
        assert str(link) == f"({r2.id}) -> ({s.id})"
        assert sorted(p.id for p in app.get_graph(s.id).parents) == [r1.id, r2.id]

    def test_duplicate_and_self_links_rejected(self, app):
        a = app.add_root("A")
        b = app.add_child("B", a.id)

        with pytest.raises(Forbidden, match="link already exists"):
            app.link(a.id, b.id)
        with pytest.raises(Forbidden, match="loops are not allowed"):
            app.link(a.id, a.id)

    def test_link_into_date_node_forbidden(self, app):
        """A date node can never become a child."""
        app.add_child("task", "2024-03-01")
        root = app.add_root("R")

        with pytest.raises(Forbidden, match="cannot unroot date node"):
            app.link(root.id, "2024-03-01")

    def test_link_from_new_date_creates_it(self, app):
        """Scheduling an existing task on another day creates that day."""
        task = app.add_root("Report")

        link = app.link("2024-03-02", task.id)

        assert [d.name for d in app.get_date_nodes()] == ["2024-03-02"]
        assert [p.name for p in app.get_graph(task.id).parents] == ["2024-03-02"]
        assert link.origin_id == app.get_graph("2024-03-02").id

    def test_failed_link_rolls_back_date_node(self, app):
        """A rejected link leaves no auto-created date node behind."""
        app.add_child("task", "2024-03-01")

        with pytest.raises(Forbidden):
            app.link("2024-05-05", "2024-03-01")

        assert [d.name for d in app.get_date_nodes()] == ["2024-03-01"]

    def test_link_missing_target(self, app):
        root = app.add_root("R")

        with pytest.raises(NotFound, match="node 99 does not exist"):
            app.link(root.id, 99)

    def test_link_propagates_completion(self, app):
        """Linking an open node under a completed one reopens it."""
        root = app.add_root("R")
        done = app.add_child("done", root.id)
        app.check(done.id)
        other = app.add_root("open")

        app.link(root.id, other.id)

        assert completed(app, root.id) is None

    def test_unlink(self, app):
        a = app.add_root("A")
        b = app.add_child("B", a.id)

        app.unlink(a.id, b.id)

        assert app.get_graph(b.id).is_root
        assert sorted(r.id for r in app.get_roots()) == [a.id, b.id]

    def test_unlink_missing_link(self, app):
        a = app.add_root("A")
        b = app.add_root("B")

        with pytest.raises(NotFound, match="does not exist"):
            app.unlink(a.id, b.id)

    def test_unlink_completes_parent(self, app):
        """Dropping the only open child completes the parent."""
        root = app.add_root("R")
        done = app.add_child("done", root.id)
        todo = app.add_child("todo", root.id)
        app.check(done.id)

        app.unlink(root.id, todo.id)

        assert completed(app, root.id) == completed(app, done.id)

    def test_unlink_last_child_deletes_date_node(self, app):
        """A date node that loses its only child disappears."""
        task = app.add_child("task", "2024-03-01")

        app.unlink("2024-03-01", task.id)

        assert app.get_date_nodes() == []
        assert [r.id for r in app.get_roots()] == [task.id]


class TestCompletion:
    """Tests for check, uncheck and propagation."""

    def test_check_then_uncheck_scenario(self, app, clock):
        """1 -> {2, 3}, 3 -> 4: check 3, then 2, then uncheck 3."""
        one = app.add_root("one")
        two = app.add_child("two", one.id)
        three = app.add_child("three", one.id)
        four = app.add_child("four", three.id)

        app.check(three.id)
        first = clock.now
        second = clock.advance(120)
        app.check(two.id)

        assert completed(app, one.id) == second
        assert completed(app, two.id) == second
        assert completed(app, three.id) == first
        assert completed(app, four.id) == first

        clock.advance(60)
        app.uncheck(three.id)

        assert completed(app, one.id) is None
        assert completed(app, three.id) is None
        assert completed(app, four.id) is None
        assert completed(app, two.id) == second

    def test_check_reaches_every_parent(self, app):
        """A shared node completes all of its parents."""
        r1 = app.add_root("R1")
        r2 = app.add_root("R2")
        shared = app.add_child("shared", r1.id)
        app.link(r2.id, shared.id)

        app.check(shared.id)

        assert completed(app, r1.id) is not None
        assert completed(app, r2.id) is not None

    def test_check_date_node_completes_day(self, app):
        """Checking a date node checks everything under it."""
        a = app.add_child("a", "2024-03-01")
        b = app.add_child("b", "2024-03-01")

        app.check("2024-03-01")

        assert completed(app, a.id) is not None
        assert completed(app, b.id) is not None

    def test_status_is_derived(self, app):
        """Partially completed nodes report in progress."""
        from grove.graph.node import TaskStatus

        root = app.add_root("R")
        a = app.add_child("a", root.id)
        app.add_child("b", root.id)
        app.check(a.id)

        assert app.get_graph(root.id).status() == TaskStatus.IN_PROGRESS

    def test_check_missing_node(self, app):
        with pytest.raises(NotFound):
            app.check(5)


class TestRemove:
    """Tests for remove and remove_recursive."""

    def test_remove_single_parent_node(self, app):
        """A node with one parent is deleted entirely."""
        root = app.add_root("R")
        child = app.add_child("C", root.id)

        app.remove(child.id)

        with pytest.raises(NotFound):
            app.get_graph(child.id)
        assert app.get_graph(root.id).is_leaf

    def test_remove_orphans_children(self, app):
        """Children losing their only parent become roots and are returned."""
        root = app.add_root("R")
        middle = app.add_child("M", root.id)
        alone = app.add_child("alone", middle.id)
        shared = app.add_child("shared", middle.id)
        other = app.add_root("Q")
        app.link(other.id, shared.id)

        orphaned = app.remove(middle.id)

        assert [n.id for n in orphaned] == [alone.id]
        assert app.get_graph(alone.id).is_root
        assert [p.id for p in app.get_graph(shared.id).parents] == [other.id]

    def test_remove_recursive_detaches_shared_node(self, app):
        """A shared descendant is only detached from the removed part."""
        root = app.add_root("R")
        anchor = app.add_child("A", root.id)
        below = app.add_child("B", anchor.id)
        shared = app.add_child("S", anchor.id)
        keep = app.add_child("K", shared.id)
        other = app.add_root("Q")
        app.link(other.id, shared.id)

        removed = app.remove_recursive(anchor.id)

        assert sorted(n.id for n in removed) == [anchor.id, below.id]
        assert [n.name for n in removed if n.id == anchor.id] == ["A"]
        survivor = app.get_graph(shared.id)
        assert [p.id for p in survivor.parents] == [other.id]
        assert [c.id for c in survivor.children] == [keep.id]
        with pytest.raises(NotFound):
            app.get_graph(below.id)

    def test_remove_recursive_whole_tree(self, app):
        root = app.add_root("R")
        child = app.add_child("C", root.id)
        app.add_child("G", child.id)

        removed = app.remove_recursive(root.id)

        assert len(removed) == 3
        assert app.get_roots() == []

    def test_remove_last_child_deletes_date_node(self, app):
        """Deleting a date node's only child deletes the date node."""
        task = app.add_child("task", "2024-03-01")

        app.remove(task.id)

        assert app.get_date_nodes() == []

    def test_remove_one_of_two_keeps_date_node(self, app):
        first = app.add_child("one", "2024-03-01")
        app.add_child("two", "2024-03-01")

        app.remove(first.id)

        assert [d.name for d in app.get_date_nodes()] == ["2024-03-01"]

    def test_remove_recursive_last_child_deletes_date_node(self, app):
        task = app.add_child("task", "2024-03-01")
        app.add_child("sub", task.id)

        app.remove_recursive(task.id)

        assert app.get_date_nodes() == []

    def test_remove_completes_parent(self, app):
        """Removing the only open child completes the parent."""
        root = app.add_root("R")
        done = app.add_child("done", root.id)
        todo = app.add_child("todo", root.id)
        app.check(done.id)

        app.remove(todo.id)

        assert completed(app, root.id) == completed(app, done.id)

    def test_remove_missing(self, app):
        with pytest.raises(NotFound):
            app.remove(3)


class TestQueries:
    """Tests for get_graph, get_roots, get_date_nodes and stat."""

    def test_synthetic_date_node(self, app):
        """A day with no tasks yields an unsaved date node with id 0."""
        node = app.get_graph("2024-03-01")

        assert node.id == 0
        assert node.name == "2024-03-01"
        assert node.is_leaf
        assert app.get_date_nodes() == []

    def test_invalid_selector(self, app):
        with pytest.raises(InvalidSelector):
            app.get_graph("two words")

    def test_missing_node(self, app):
        with pytest.raises(NotFound, match="node 4 does not exist"):
            app.get_graph(4)

    def test_roots_exclude_date_nodes(self, app):
        b = app.add_root("B")
        a = app.add_root("A")
        app.add_child("task", "2024-03-02")
        app.add_child("task", "2024-03-01")

        assert [r.id for r in app.get_roots()] == [b.id, a.id]
        assert [d.name for d in app.get_date_nodes()] == ["2024-03-01", "2024-03-02"]

    def test_stat(self, app):
        root = app.add_root("R")
        a = app.add_child("a", root.id)
        app.add_child("b", root.id)
        app.add_child("c", a.id)
        app.check(a.id)

        info = app.stat(root.id)

        assert info.total_leaves == 2
        assert info.completed_leaves == 1
        assert info.child_count == 2
        assert info.parent_count == 0
        assert str(info.status) == "in progress"

    def test_today_honours_day_start(self, config, clock):
        """Before day_start o'clock, today is still the previous day."""
        from dataclasses import replace
        from datetime import datetime, timedelta

        from grove.app import App

        shifted = replace(config, day_start=23)
        with App(shifted, clock=clock) as app:
            expected = datetime.fromtimestamp(clock.now) - timedelta(hours=23)
            assert app.today() == expected.strftime("%Y-%m-%d")


class TestPersistence:
    """Tests for reloading stored structures."""

    def test_round_trip(self, config, clock):
        """Reloading from a new connection reproduces nodes, edges and status."""
        from grove.app import App

        with App(config, clock=clock) as app:
            r1 = app.add_root("R1")
            r2 = app.add_root("R2")
            s = app.add_child("S", r1.id)
            t = app.add_child("T", s.id)
            app.add_child("U", s.id)
            app.link(r2.id, s.id)
            app.check(t.id)
            before = app.get_graph(r1.id)
            edges = before.tree.edges()
            statuses = {n.id: n.status() for n in before.all()}

        with App(config, clock=clock) as reopened:
            after = reopened.get_graph(t.id)

            assert after.tree.edges() == edges
            assert {n.id: n.status() for n in after.all()} == statuses
            assert [n.name for n in after.all()] == ["R1", "R2", "S", "T", "U"]

    def test_failed_operation_changes_nothing(self, app):
        """A rejected operation leaves the stored graph untouched."""
        a = app.add_root("A")
        b = app.add_child("B", a.id)
        c = app.add_child("C", b.id)
        app.check(c.id)
        snapshot = {n.id: n.completed_at for n in app.get_graph(a.id).all()}

        with pytest.raises(Forbidden):
            app.link(c.id, a.id)

        assert {n.id: n.completed_at for n in app.get_graph(a.id).all()} == snapshot
