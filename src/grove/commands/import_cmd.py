"""
grove.commands.import_cmd - Import trees from tab-indented text.

Reads FILE (or stdin), stores every top-level line as a tree under the
given parent (today's date node by default) or as a new root with -r.
"""

from __future__ import annotations

import argparse
import sys

from grove.commands.common import make_renderer, open_app
from grove.errors import GroveError
from grove.graph.importer import import_nodes


def _read_source(path: str | None) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def run(args: argparse.Namespace) -> int:
    """Run the import command."""
    skeletons = import_nodes(_read_source(args.file))

    errors: list[str] = []
    trees = 0
    nodes = 0
    with open_app(args) as app:
        renderer = make_renderer(args, app)
        parent = None if args.root else (args.parent or app.today())
        for skeleton in skeletons:
            try:
                stored = app.add_tree(skeleton, parent)
            except GroveError as e:
                errors.append(f"Couldn't import tree: {e}")
                continue
            tree = stored.induced_tree()
            print(renderer.tree_string(tree), end="")
            trees += 1
            nodes += len(tree.tree)

    for error in errors:
        print(error, file=sys.stderr)
    print(f"Imported {trees} trees ({nodes} nodes)")
    return 1 if errors else 0
