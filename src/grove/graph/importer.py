"""Importer - build node skeletons from tab-indented text.

Each non-blank line is one node; the number of leading tabs gives its
depth. A line is attached to the nearest preceding line that is less
indented. The result is a forest of unsaved trees whose ids are local
placeholders; grove.app assigns real ids when the trees are stored.
"""

from __future__ import annotations

from typing import Iterable

from grove.errors import InvalidName
from grove.graph.multitree import Multitree, NodeRef
from grove.graph.names import validate_node_name
from grove.graph.node import TaskNode


def parse_import_line(line: str) -> tuple[int, str]:
    """Split a line into (indent, name) and validate the name.

    Raises:
        InvalidName: If the name is empty, too long or reserved.
    """
    indent = len(line) - len(line.lstrip("\t"))
    name = line[indent:].rstrip("\r\n")
    validate_node_name(name)
    return indent, name


def import_nodes(source: str | Iterable[str]) -> list[NodeRef]:
    """Build trees from tab-indented lines.

    Args:
        source: Whole text or an iterable of lines (e.g. an open file).

    Returns:
        Root handles of the imported trees, in input order. Each root
        lives in its own arena.

    Raises:
        InvalidName: With the 1-based line number of the offending line.
    """
    lines = source.splitlines() if isinstance(source, str) else source

    roots: list[NodeRef] = []
    stack: list[tuple[int, NodeRef]] = []

    for line_num, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        try:
            indent, name = parse_import_line(line)
        except InvalidName as e:
            raise InvalidName(f"line {line_num}: {e.message}") from e

        # Backtrack until the top of the stack is shallower than this line.
        while stack and stack[-1][0] >= indent:
            stack.pop()

        if not stack:
            node = Multitree.single(TaskNode(id=1, name=name))
            roots.append(node)
        else:
            parent = stack[-1][1]
            tree = parent.tree
            node = tree.add(TaskNode(id=tree.next_id(), name=name))
            parent.add_child(node)
        stack.append((indent, node))

    return roots
