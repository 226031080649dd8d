"""Database schema and migrations.

The schema version lives in ``PRAGMA user_version``. Each entry of
MIGRATIONS moves the database one version forward; the first one
initializes an empty file.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Callable

logger = logging.getLogger(__name__)

_CREATE_NODES = """\
CREATE TABLE nodes (
    node_id INTEGER PRIMARY KEY,
    node_name VARCHAR(100) NOT NULL,
    node_alias VARCHAR(100) DEFAULT NULL,
    node_created INTEGER NOT NULL DEFAULT (strftime('%s', 'now')),
    node_completed INTEGER DEFAULT NULL,

    UNIQUE(node_alias)
)"""

_CREATE_LINKS = """\
CREATE TABLE links (
    link_id INTEGER PRIMARY KEY,
    origin_id INTEGER NOT NULL,
    dest_id INTEGER NOT NULL,

    FOREIGN KEY (origin_id)
        REFERENCES nodes (node_id)
        ON DELETE CASCADE,

    FOREIGN KEY (dest_id)
        REFERENCES nodes (node_id)
        ON DELETE CASCADE,

    CHECK(origin_id != dest_id),
    UNIQUE(origin_id, dest_id)
)"""


def _migrate_to_v1(conn: sqlite3.Connection) -> None:
    """Initial schema."""
    conn.execute(_CREATE_NODES)
    conn.execute(_CREATE_LINKS)


def _migrate_to_v2(conn: sqlite3.Connection) -> None:
    """Index both link endpoints; the loader queries each per node."""
    conn.execute("CREATE INDEX IF NOT EXISTS idx_links_origin ON links(origin_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_links_dest ON links(dest_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_nodes_name ON nodes(node_name)")


MIGRATIONS: list[Callable[[sqlite3.Connection], None]] = [
    _migrate_to_v1,
    _migrate_to_v2,
]

SCHEMA_VERSION = len(MIGRATIONS)


def get_user_version(conn: sqlite3.Connection) -> int:
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


def migrate(conn: sqlite3.Connection) -> int:
    """Bring the database up to SCHEMA_VERSION.

    Runs inside the caller's transaction.

    Returns:
        The version the database was at before migrating.

    Raises:
        RuntimeError: If the version is negative or newer than this release.
    """
    current = get_user_version(conn)
    if current < 0:
        raise RuntimeError("corrupted database (negative user_version)")
    if current > SCHEMA_VERSION:
        raise RuntimeError(
            "database version is not supported by this version of grove; "
            "try upgrading to the latest release"
        )

    version = current
    while version < SCHEMA_VERSION:
        logger.debug("migrating database to v%d", version + 1)
        MIGRATIONS[version](conn)
        version += 1
        # PRAGMA values cannot be bound as parameters.
        conn.execute(f"PRAGMA user_version = {version}")
    return current
