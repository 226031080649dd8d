"""
grove.commands.common - Helpers shared by the command modules.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace

from grove.app import App
from grove.config import get_config
from grove.graph.render import Renderer, should_use_color


def open_app(args: argparse.Namespace) -> App:
    """Open the App described by --config/--db and the config file."""
    config = get_config(getattr(args, "config", None))
    db_path = getattr(args, "db", None)
    if db_path is not None:
        config = replace(config, database_path=db_path)
    return App(config)


def make_renderer(args: argparse.Namespace, app: App) -> Renderer:
    """Renderer honouring --color, then display.color from config."""
    setting = getattr(args, "color", None) or app.config.color
    return Renderer(use_color=should_use_color(setting, sys.stdout), today=app.today())


def capitalize(message: str) -> str:
    return message[:1].upper() + message[1:]


def report_error(prefix: str, error: Exception) -> None:
    """Print "<prefix>: <error>" to stderr."""
    print(f"{prefix}: {error}", file=sys.stderr)
