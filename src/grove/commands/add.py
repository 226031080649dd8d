"""
grove.commands.add - Create a node.

Without options the node goes under today's date node, which is created
on demand.
"""

from __future__ import annotations

import argparse

from grove.commands.common import make_renderer, open_app


def run(args: argparse.Namespace) -> int:
    """Run the add command."""
    name = " ".join(args.name)
    with open_app(args) as app:
        renderer = make_renderer(args, app)
        if args.root:
            node = app.add_root(name)
            print(renderer.paint(renderer.CYAN, f"({node.id})"))
            return 0

        parent = args.parent or app.today()
        node = app.add_child(name, parent)
        # The freshly created node has exactly one parent.
        predecessor = node.parents[0]
        accent = renderer.YELLOW if predecessor.name == renderer.today else renderer.CYAN
        print(f"({predecessor.id}) -> {renderer.paint(accent, f'({node.id})')}")
    return 0
