"""
grove.commands.remove - Delete nodes.

Errors for one selector do not stop the others; they are reported at the
end and turn the exit status to 1.
"""

from __future__ import annotations

import argparse
import sys

from grove.commands.common import make_renderer, open_app
from grove.errors import GroveError


def run(args: argparse.Namespace) -> int:
    """Run the remove command."""
    messages: list[str] = []
    errors: list[str] = []

    with open_app(args) as app:
        renderer = make_renderer(args, app)
        for selector in args.nodes:
            try:
                if args.recursive:
                    for node in app.remove_recursive(selector):
                        messages.append(f"Removed: {renderer.node_line(node)}")
                else:
                    removed = renderer.node_line(app.get_graph(selector))
                    orphaned = app.remove(selector)
                    messages.append(f"Removed: {removed}")
                    for node in orphaned:
                        messages.append(f"Orphaned: {renderer.node_line(node)}")
            except GroveError as e:
                errors.append(f"Couldn't remove {selector}: {e}")

    if args.print_removed:
        for message in messages:
            print(message)
    for error in errors:
        print(error, file=sys.stderr)
    return 1 if errors else 0
