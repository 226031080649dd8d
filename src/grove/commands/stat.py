"""
grove.commands.stat - Show details of a single node.
"""

from __future__ import annotations

import argparse
from datetime import datetime

from grove.commands.common import make_renderer, open_app


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def run(args: argparse.Namespace) -> int:
    """Run the stat command."""
    with open_app(args) as app:
        renderer = make_renderer(args, app)
        info = app.stat(args.node)
        node = info.node

        if info.parent_count + info.child_count > 0:
            print(renderer.neighbors_string(node))

        status = str(info.status)
        if info.total_leaves > 0:
            status += f" ({info.completed_leaves}/{info.total_leaves})"
        name = renderer.paint(renderer.BOLD, node.name) if node.is_root else node.name

        print(f"ID: {node.id}")
        print(f"Name: {name}")
        print(f"Status: {status}")
        print(f"Predecessors: {info.parent_count}")
        print(f"Successors: {info.child_count}")
        if node.alias:
            print(f"Alias: {node.alias}")
        print(f"Created: {_format_time(node.created_at)}")
        if node.completed_at is not None:
            print(f"Checked: {_format_time(node.completed_at)}")
    return 0
