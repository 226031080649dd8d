"""
grove.commands.tree - Show the tree below a node.
"""

from __future__ import annotations

import argparse

from grove.commands.common import make_renderer, open_app


def run(args: argparse.Namespace) -> int:
    """Run the tree command (the default when no command is given)."""
    with open_app(args) as app:
        renderer = make_renderer(args, app)
        node = app.get_graph(getattr(args, "node", None) or app.today())
        print(renderer.tree_string(node), end="")
    return 0
