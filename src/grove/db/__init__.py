"""Storage layer - SQLite database, row helpers and the graph loader."""

from grove.db.database import (
    Database,
    classify_error,
    delete_link,
    delete_node,
    get_children,
    get_link,
    get_node,
    get_node_by_alias,
    get_node_by_name,
    get_parents,
    get_roots,
    insert_link,
    insert_node,
    update_alias,
    update_completion,
    update_name,
)
from grove.db.loader import load_component
from grove.db.schema import SCHEMA_VERSION, migrate

__all__ = [
    "Database",
    "SCHEMA_VERSION",
    "classify_error",
    "delete_link",
    "delete_node",
    "get_children",
    "get_link",
    "get_node",
    "get_node_by_alias",
    "get_node_by_name",
    "get_parents",
    "get_roots",
    "insert_link",
    "insert_node",
    "load_component",
    "migrate",
    "update_alias",
    "update_completion",
    "update_name",
]
