"""
grove.commands.rename - Rename a node.
"""

from __future__ import annotations

import argparse

from grove.commands.common import open_app


def run(args: argparse.Namespace) -> int:
    """Run the rename command."""
    with open_app(args) as app:
        app.rename(args.node, " ".join(args.name))
    return 0
