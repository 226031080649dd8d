"""Tests for building trees from tab-indented text."""

import pytest

from grove.errors import InvalidName
from grove.graph.importer import import_nodes, parse_import_line


class TestParseImportLine:
    """Tests for parse_import_line."""

    def test_counts_leading_tabs(self):
        """Leading tabs are the indent; the rest is the name."""
        assert parse_import_line("\t\tDesk") == (2, "Desk")
        assert parse_import_line("Home") == (0, "Home")

    def test_keeps_inner_whitespace(self):
        """Spaces inside a name are part of the name."""
        assert parse_import_line("\tMake the  bed") == (1, "Make the  bed")

    def test_reserved_name_rejected(self):
        """A date name cannot be imported as a task."""
        with pytest.raises(InvalidName, match="reserved"):
            parse_import_line("2024-03-01")


class TestImportNodes:
    """Tests for import_nodes."""

    def test_builds_nested_tree(self):
        """Indentation decides the parent of every line."""
        text = "Clean the house\n\tBedroom\n\t\tDesk\n\t\tBed\n\tKitchen\n"

        roots = import_nodes(text)

        assert len(roots) == 1
        root = roots[0]
        assert root.name == "Clean the house"
        assert [c.name for c in root.children] == ["Bedroom", "Kitchen"]
        bedroom = root.children[0]
        assert [c.name for c in bedroom.children] == ["Desk", "Bed"]
        assert len(root.tree) == 5

    def test_multiple_roots(self):
        """Each unindented line starts a new tree in its own arena."""
        roots = import_nodes(["First\n", "\tA\n", "Second\n"])

        assert [r.name for r in roots] == ["First", "Second"]
        assert roots[0].tree is not roots[1].tree
        assert [c.name for c in roots[0].children] == ["A"]
        assert roots[1].is_leaf

    def test_skips_blank_lines(self):
        """Empty and whitespace-only lines are ignored."""
        roots = import_nodes("Home\n\n  \n\tGarden\n")

        assert [c.name for c in roots[0].children] == ["Garden"]

    def test_dedent_returns_to_ancestor(self):
        """A shallower line attaches to the matching earlier level."""
        roots = import_nodes("R\n\tA\n\t\tB\n\t\t\tC\n\tD\n")

        root = roots[0]
        assert [c.name for c in root.children] == ["A", "D"]

    def test_error_reports_line_number(self):
        """An invalid name is reported with its 1-based line number."""
        text = "Home\n\tGarden\n\t" + "x" * 101 + "\n"

        with pytest.raises(InvalidName, match="line 3: invalid node name"):
            import_nodes(text)

    def test_empty_input(self):
        """No lines means no trees."""
        assert import_nodes("") == []
