"""
grove.commands.link - Create and remove links between nodes.
"""

from __future__ import annotations

import argparse

from grove.commands.common import open_app, report_error
from grove.errors import GroveError


def run(args: argparse.Namespace) -> int:
    """Run link (one origin, many targets) or unlink."""
    with open_app(args) as app:
        if args.command == "unlink":
            app.unlink(args.origin, args.target)
            return 0

        failed = 0
        for target in args.targets:
            try:
                app.link(args.origin, target)
            except GroveError as e:
                report_error(f"Couldn't create link ({args.origin}) -> ({target})", e)
                failed += 1
    return 1 if failed else 0
