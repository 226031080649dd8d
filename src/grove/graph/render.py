"""Node, tree and neighbourhood rendering for terminal output.

Renders a loaded component with optional ANSI colors:

    [~] Clean up the house (234)
     ├──[~] Clean up the bedroom (235)
     │   ├──[x] Clean up the desk (236)
     │   └──[ ] Make the bed (238)
     └──[ ] Clean up the kitchen (239)
"""

from __future__ import annotations

import os
import sys
from typing import TextIO

from grove.graph.multitree import NodeRef
from grove.graph.names import today_name


def should_use_color(setting: str = "auto", stream: TextIO | None = None) -> bool:
    """Resolve a color setting ("auto", "always", "never") to a bool.

    "auto" enables color only for a TTY and when NO_COLOR is unset.
    """
    if setting == "always":
        return True
    if setting == "never":
        return False
    if os.environ.get("NO_COLOR"):
        return False
    stream = stream or sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


class Renderer:
    """Renders nodes to (optionally) ANSI-colored strings."""

    # ANSI escape codes
    BOLD = "\033[1m"
    CYAN = "\033[36m"
    YELLOW = "\033[33m"
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True, today: str | None = None) -> None:
        """Initialize renderer.

        Args:
            use_color: Whether to emit ANSI color codes.
            today: Date-node name treated as today (default: local date).
        """
        self.use_color = use_color
        self.today = today or today_name()

    def paint(self, code: str, text: str) -> str:
        """Wrap text in an ANSI code if colors enabled."""
        if not self.use_color:
            return text
        return f"{code}{text}{self.RESET}"

    def _accent(self, node: NodeRef) -> str:
        # Descendants of today's date node stand out.
        for root in node.roots():
            if root.name == self.today:
                return self.YELLOW
        return self.CYAN

    def node_line(self, node: NodeRef) -> str:
        """Return "[x] name (id:alias)" for a single node."""
        accent = self._accent(node)
        name = node.name
        if node.is_root:
            name = self.paint(self.BOLD, name)
        checkbox = self.paint(accent, node.status().checkbox)
        label = self.paint(accent, node.record.label())
        return f"{checkbox} {name} {label}"

    def tree_string(self, node: NodeRef) -> str:
        """Return the tree below node drawn with box characters."""
        lines: list[str] = []

        def traverse(current: NodeRef, cont: list[bool]) -> None:
            indent = ""
            if cont:
                for more in cont[:-1]:
                    indent += " │  " if more else "    "
                indent += " ├──" if cont[-1] else " └──"
            lines.append(f"{indent}{self.node_line(current)}")

            children = current.children
            for i, child in enumerate(children):
                traverse(child, cont + [i != len(children) - 1])

        traverse(node, [])
        return "\n".join(lines) + "\n"

    def neighbors_string(self, node: NodeRef) -> str:
        """Return a sketch of the node's parents and children.

            (45) ───┐
           (150) ───┴─── (123) ───┬─── (124)
                                  └─── (125)
        """
        pids = [f"({p.id})" for p in node.parents]
        cids = [f"({c.id})" for c in node.children]
        width = max((len(p) for p in pids), default=0)

        output = ""
        left = 0
        if len(pids) == 1:
            output += pids[0].rjust(width) + " ──── "
            left = width + 6
        elif len(pids) > 1:
            for i, pid in enumerate(pids):
                padded = pid.rjust(width)
                if i == 0:
                    output += padded + " ───┐\n"
                elif i != len(pids) - 1:
                    output += padded + " ───┤\n"
                else:
                    output += padded + " ───┴─── "
            left = width + 9

        own = f"({node.id})"
        left += len(own)
        output += self.paint(self.CYAN, own)

        if len(cids) == 1:
            output += " ──── " + cids[0] + "\n"
        elif len(cids) > 1:
            spaces = " " * left
            for i, cid in enumerate(cids):
                if i == 0:
                    output += " ───┬─── " + cid + "\n"
                elif i != len(cids) - 1:
                    output += spaces + "    ├─── " + cid + "\n"
                else:
                    output += spaces + "    └─── " + cid + "\n"
        else:
            output += "\n"
        return output
