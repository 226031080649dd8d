"""
grove.commands.list_cmd - List roots, date nodes, or a node's children.
"""

from __future__ import annotations

import argparse

from grove.commands.common import make_renderer, open_app


def run(args: argparse.Namespace) -> int:
    """Run list (children or roots) and list-dates."""
    with open_app(args) as app:
        renderer = make_renderer(args, app)
        if args.command in ("list-dates", "lsd"):
            nodes = app.get_date_nodes()
        elif getattr(args, "node", None):
            nodes = list(app.get_graph(args.node).children)
        else:
            nodes = app.get_roots()

        for node in nodes:
            print(renderer.node_line(node))
    return 0
