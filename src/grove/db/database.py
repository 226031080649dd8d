"""SQLite storage for nodes and links.

Database owns one connection opened in autocommit mode; every unit of
work goes through Database.transaction(), which issues BEGIN IMMEDIATE
so the write lock is taken up front and transactions are serialized.

The row helpers below take the connection handed out by transaction()
and work on plain rows; they know nothing about the multitree rules.
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
from pathlib import Path
from typing import Iterator

from grove.db.schema import migrate
from grove.errors import Conflict, Forbidden, GroveError, NotFound, StorageFailure
from grove.graph.node import Link, TaskNode

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

_NODE_COLUMNS = "node_id, node_name, node_alias, node_created, node_completed"


def classify_error(error: sqlite3.Error) -> GroveError:
    """Map a raw sqlite3 error onto the grove error taxonomy.

    - locked/busy: Conflict (the operation may be retried)
    - UNIQUE or CHECK constraint: Forbidden
    - FOREIGN KEY constraint: NotFound
    - anything else: StorageFailure
    """
    message = str(error)
    lowered = message.lower()
    if isinstance(error, sqlite3.OperationalError) and (
        "locked" in lowered or "busy" in lowered
    ):
        return Conflict(f"database is busy: {message}")
    if isinstance(error, sqlite3.IntegrityError):
        if "foreign key" in lowered:
            return NotFound(f"referenced node does not exist: {message}")
        if "unique" in lowered or "check" in lowered:
            return Forbidden(message)
    return StorageFailure(message)


@contextlib.contextmanager
def _begin(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """BEGIN IMMEDIATE ... COMMIT, rolling back on any exception."""
    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.Error as e:
        raise classify_error(e) from e
    try:
        yield conn
        conn.execute("COMMIT")
    except sqlite3.Error as e:
        _rollback(conn)
        raise classify_error(e) from e
    except BaseException:
        _rollback(conn)
        raise


def _rollback(conn: sqlite3.Connection) -> None:
    # SQLite may already have rolled back on its own (e.g. after SQLITE_FULL).
    if conn.in_transaction:
        conn.execute("ROLLBACK")


class Database:
    """A grove database file.

    Usage:
        db = Database(path)
        with db.transaction() as conn:
            node = get_node(conn, 1)
        db.close()
    """

    def __init__(self, path: str | Path = MEMORY, timeout: float = 5.0) -> None:
        self.path = str(path)
        self.timeout = timeout
        self._conn = self._open()

    def _open(self) -> sqlite3.Connection:
        target = self.path
        if target != MEMORY:
            target = str(Path(target).expanduser())
            Path(target).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(target, timeout=self.timeout, isolation_level=None)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON")
        except sqlite3.Error as e:
            raise classify_error(e) from e

        try:
            with _begin(conn):
                previous = migrate(conn)
        except GroveError:
            conn.close()
            raise
        except RuntimeError as e:
            conn.close()
            raise StorageFailure(str(e)) from e
        if previous == 0:
            logger.debug("initialized database at %s", target)
        return conn

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block as one serializable transaction.

        Commits when the block completes; rolls back and re-raises on any
        exception. sqlite3 errors are reclassified via classify_error.
        """
        logger.debug("begin transaction")
        with _begin(self._conn) as conn:
            yield conn
        logger.debug("commit transaction")

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


# Row conversion


def row_to_node(row: sqlite3.Row | None) -> TaskNode | None:
    if row is None:
        return None
    return TaskNode(
        id=row["node_id"],
        name=row["node_name"],
        alias=row["node_alias"],
        created_at=row["node_created"],
        completed_at=row["node_completed"],
    )


def rows_to_nodes(rows: list[sqlite3.Row]) -> list[TaskNode]:
    return [node for node in map(row_to_node, rows) if node is not None]


# Node queries


def get_node(conn: sqlite3.Connection, node_id: int) -> TaskNode | None:
    row = conn.execute(
        f"SELECT {_NODE_COLUMNS} FROM nodes WHERE node_id = ?", (node_id,)
    ).fetchone()
    return row_to_node(row)


def get_node_by_name(conn: sqlite3.Connection, name: str) -> TaskNode | None:
    """Return the lowest-id node with the given name (used for date nodes)."""
    row = conn.execute(
        f"SELECT {_NODE_COLUMNS} FROM nodes WHERE node_name = ? ORDER BY node_id LIMIT 1",
        (name,),
    ).fetchone()
    return row_to_node(row)


def get_node_by_alias(conn: sqlite3.Connection, alias: str) -> TaskNode | None:
    row = conn.execute(
        f"SELECT {_NODE_COLUMNS} FROM nodes WHERE node_alias = ?", (alias,)
    ).fetchone()
    return row_to_node(row)


def get_parents(conn: sqlite3.Connection, node_id: int) -> list[TaskNode]:
    """Return direct parents of node_id, in link creation order."""
    rows = conn.execute(
        "SELECT n.node_id, n.node_name, n.node_alias, n.node_created, n.node_completed "
        "FROM nodes n JOIN links l ON n.node_id = l.origin_id "
        "WHERE l.dest_id = ? ORDER BY l.link_id",
        (node_id,),
    ).fetchall()
    return rows_to_nodes(rows)


def get_children(conn: sqlite3.Connection, node_id: int) -> list[TaskNode]:
    """Return direct children of node_id, in link creation order."""
    rows = conn.execute(
        "SELECT n.node_id, n.node_name, n.node_alias, n.node_created, n.node_completed "
        "FROM nodes n JOIN links l ON n.node_id = l.dest_id "
        "WHERE l.origin_id = ? ORDER BY l.link_id",
        (node_id,),
    ).fetchall()
    return rows_to_nodes(rows)


def get_roots(conn: sqlite3.Connection) -> list[TaskNode]:
    """Return every node without parents, by ascending id."""
    rows = conn.execute(
        f"SELECT {_NODE_COLUMNS} FROM nodes "
        "WHERE node_id NOT IN (SELECT dest_id FROM links) ORDER BY node_id"
    ).fetchall()
    return rows_to_nodes(rows)


# Node writes


def insert_node(
    conn: sqlite3.Connection,
    name: str,
    created_at: int,
    alias: str | None = None,
    completed_at: int | None = None,
) -> int:
    """Insert a node row and return its new id."""
    cursor = conn.execute(
        "INSERT INTO nodes (node_name, node_alias, node_created, node_completed) "
        "VALUES (?, ?, ?, ?)",
        (name, alias, created_at, completed_at),
    )
    return int(cursor.lastrowid)


def delete_node(conn: sqlite3.Connection, node_id: int) -> None:
    """Delete a node; its links go with it (ON DELETE CASCADE)."""
    cursor = conn.execute("DELETE FROM nodes WHERE node_id = ?", (node_id,))
    if cursor.rowcount == 0:
        raise NotFound(f"node ({node_id}) does not exist")


def update_completion(
    conn: sqlite3.Connection, node_id: int, completed_at: int | None
) -> None:
    conn.execute(
        "UPDATE nodes SET node_completed = ? WHERE node_id = ?", (completed_at, node_id)
    )


def update_name(conn: sqlite3.Connection, node_id: int, name: str) -> None:
    conn.execute("UPDATE nodes SET node_name = ? WHERE node_id = ?", (name, node_id))


def update_alias(conn: sqlite3.Connection, node_id: int, alias: str | None) -> None:
    conn.execute("UPDATE nodes SET node_alias = ? WHERE node_id = ?", (alias, node_id))


# Links


def get_link(conn: sqlite3.Connection, origin_id: int, dest_id: int) -> Link | None:
    row = conn.execute(
        "SELECT link_id, origin_id, dest_id FROM links WHERE origin_id = ? AND dest_id = ?",
        (origin_id, dest_id),
    ).fetchone()
    if row is None:
        return None
    return Link(id=row["link_id"], origin_id=row["origin_id"], dest_id=row["dest_id"])


def insert_link(conn: sqlite3.Connection, origin_id: int, dest_id: int) -> int:
    """Insert origin -> dest and return the link id."""
    cursor = conn.execute(
        "INSERT INTO links (origin_id, dest_id) VALUES (?, ?)", (origin_id, dest_id)
    )
    return int(cursor.lastrowid)


def delete_link(conn: sqlite3.Connection, origin_id: int, dest_id: int) -> None:
    cursor = conn.execute(
        "DELETE FROM links WHERE origin_id = ? AND dest_id = ?", (origin_id, dest_id)
    )
    if cursor.rowcount == 0:
        raise NotFound(f"link ({origin_id}) -> ({dest_id}) does not exist")
