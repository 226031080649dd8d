"""
grove.commands.check - Mark nodes completed or not completed.
"""

from __future__ import annotations

import argparse

from grove.commands.common import open_app


def run(args: argparse.Namespace) -> int:
    """Run check or uncheck on every given node, stopping at the first error."""
    with open_app(args) as app:
        action = app.uncheck if args.command == "uncheck" else app.check
        for selector in args.nodes:
            action(selector)
    return 0
