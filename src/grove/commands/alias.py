"""
grove.commands.alias - Set or clear a node's alias.
"""

from __future__ import annotations

import argparse

from grove.commands.common import open_app


def run(args: argparse.Namespace) -> int:
    """Run alias or unalias."""
    with open_app(args) as app:
        if args.command == "unalias":
            app.set_alias(args.node, None)
        else:
            app.set_alias(args.node, args.alias)
    return 0
