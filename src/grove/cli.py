"""
grove.cli - Command-line interface.

Main entry point for the grove CLI tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from grove import __version__
from grove.commands import (
    add,
    alias,
    check,
    completion,
    import_cmd,
    link,
    list_cmd,
    remove,
    rename,
    stat,
    tree,
)
from grove.commands.common import capitalize
from grove.errors import GroveError


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="grove",
        description="Multitree task organizer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  grove add Buy milk               # Add a task for today
  grove add -r Home                # Create a root
  grove add -p home Fix the sink   # Add a task under alias "home"
  grove link 2024-03-01 12         # Also schedule task 12 on March 1st
  grove check 12                   # Complete task 12 (and its subtasks)
  grove                            # Show today's tree

Nodes are selected by ID, by date (YYYY-MM-DD) or by alias.

For detailed command help: grove <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"grove {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Override database location",
        metavar="PATH",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        help="Colorize output (default: from config, else auto)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # add
    add_parser = subparsers.add_parser(
        "add",
        help="Create a node (under today's date node by default)",
    )
    add_target = add_parser.add_mutually_exclusive_group()
    add_target.add_argument("-p", "--parent", metavar="NODE", help="Parent node selector")
    add_target.add_argument("-r", "--root", action="store_true", help="Create a root node")
    add_parser.add_argument("name", nargs="+", help="Words forming the node name")

    # tree
    tree_parser = subparsers.add_parser("tree", help="Show the tree below a node (default: today)")
    tree_parser.add_argument("node", nargs="?", help="Node selector")

    # list / list-dates
    list_parser = subparsers.add_parser(
        "list",
        aliases=["ls"],
        help="List a node's children, or all roots",
    )
    list_parser.add_argument("node", nargs="?", help="Node selector")
    subparsers.add_parser("list-dates", aliases=["lsd"], help="List all date nodes")

    # check / uncheck
    for name, text in (("check", "Mark nodes completed"), ("uncheck", "Mark nodes not completed")):
        check_parser = subparsers.add_parser(name, help=text)
        check_parser.add_argument("nodes", nargs="+", metavar="NODE", help="Node selector(s)")

    # link / unlink
    link_parser = subparsers.add_parser("link", help="Link an origin to one or more targets")
    link_parser.add_argument("origin", metavar="ORIGIN", help="Origin selector")
    link_parser.add_argument("targets", nargs="+", metavar="TARGET", help="Target selector(s)")
    unlink_parser = subparsers.add_parser("unlink", help="Remove a link")
    unlink_parser.add_argument("origin", metavar="ORIGIN", help="Origin selector")
    unlink_parser.add_argument("target", metavar="TARGET", help="Target selector")

    # rename
    rename_parser = subparsers.add_parser("rename", help="Rename a node")
    rename_parser.add_argument("node", metavar="NODE", help="Node selector")
    rename_parser.add_argument("name", nargs="+", help="Words forming the new name")

    # alias / unalias
    alias_parser = subparsers.add_parser("alias", help="Give a node an alias")
    alias_parser.add_argument("node", metavar="NODE", help="Node selector")
    alias_parser.add_argument("alias", metavar="ALIAS", help="New alias")
    unalias_parser = subparsers.add_parser("unalias", help="Remove a node's alias")
    unalias_parser.add_argument("node", metavar="NODE", help="Node selector")

    # remove
    remove_parser = subparsers.add_parser("remove", aliases=["rm"], help="Remove nodes")
    remove_parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Also remove descendants not shared with other nodes",
    )
    remove_parser.add_argument(
        "-v",
        "--verbose",
        dest="print_removed",
        action="store_true",
        help="Print each removed node",
    )
    remove_parser.add_argument("nodes", nargs="+", metavar="NODE", help="Node selector(s)")

    # import
    import_parser = subparsers.add_parser(
        "import",
        help="Import trees from tab-indented lines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Each line is a node; leading tabs give its depth:

  Clean the house
  \tBedroom
  \t\tDesk
  \tKitchen
""",
    )
    import_target = import_parser.add_mutually_exclusive_group()
    import_target.add_argument("-p", "--parent", metavar="NODE", help="Parent for the tree roots")
    import_target.add_argument("-r", "--root", action="store_true", help="Import as root trees")
    import_parser.add_argument(
        "file", nargs="?", metavar="FILE", help="Input file (default: stdin)"
    )

    # stat
    stat_parser = subparsers.add_parser("stat", help="Show node details")
    stat_parser.add_argument("node", metavar="NODE", help="Node selector")

    # completion
    completion_parser = subparsers.add_parser(
        "completion",
        help="Generate shell tab-completion scripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
  First, install the completion extra:
    pip install grove[completion]
""",
    )
    completion_parser.add_argument(
        "--shell",
        choices=list(completion.SHELLS),
        help="Target shell (default: detected from $SHELL)",
    )
    completion_action = completion_parser.add_mutually_exclusive_group()
    completion_action.add_argument(
        "--install", action="store_true", help="Append the activation line to your rc file"
    )
    completion_action.add_argument(
        "--uninstall", action="store_true", help="Remove the activation line from your rc file"
    )

    # version
    subparsers.add_parser("version", help="Show version information")

    return parser


COMMANDS = {
    "add": add.run,
    "tree": tree.run,
    "list": list_cmd.run,
    "ls": list_cmd.run,
    "list-dates": list_cmd.run,
    "lsd": list_cmd.run,
    "check": check.run,
    "uncheck": check.run,
    "link": link.run,
    "unlink": link.run,
    "rename": rename.run,
    "alias": alias.run,
    "unalias": alias.run,
    "remove": remove.run,
    "rm": remove.run,
    "import": import_cmd.run,
    "stat": stat.run,
    "completion": completion.run,
}


def configure_logging(verbose: bool) -> None:
    """Send library logs to stderr; DEBUG with -v, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install grove[completion]
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    # No command shows today's tree
    if not args.command:
        args.command = "tree"
        args.node = None

    try:
        if args.command == "version":
            return version_command(args)
        handler = COMMANDS.get(args.command)
        if handler is None:
            parser.print_help()
            return 1
        return handler(args)

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except GroveError as e:
        print(f"Error: {capitalize(e.message)}", file=sys.stderr)
        return 1
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def version_command(args: argparse.Namespace) -> int:
    """Handle version command."""
    print(f"grove {__version__}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
