"""Node records - plain data for tasks and links.

This module provides the record types stored in a Multitree arena:
- TaskStatus: Derived completion status of a node
- TaskNode: Identity and task-state record for one node
- Link: A persisted directed edge between two nodes

Adjacency is not stored on the records; it lives in the arena
(grove.graph.multitree) as lists of ids.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from grove.graph.names import DATE_FORMAT, is_date_name


class TaskStatus(Enum):
    """Derived status of a node. Only completion is ever persisted."""

    COMPLETED = "completed"
    IN_PROGRESS = "in progress"
    INACTIVE = "inactive"

    @property
    def checkbox(self) -> str:
        """Return the checkbox glyph used in listings."""
        return {
            TaskStatus.COMPLETED: "[x]",
            TaskStatus.IN_PROGRESS: "[~]",
            TaskStatus.INACTIVE: "[ ]",
        }[self]

    def __str__(self) -> str:
        return self.value


@dataclass
class TaskNode:
    """A single task (or date) node.

    Attributes:
        id: Storage-assigned identity; 0 means "not persisted".
        name: Display name, 1..100 characters.
        alias: Optional unique secondary identifier.
        created_at: Unix timestamp of creation.
        completed_at: Unix timestamp of completion, or None.
    """

    id: int
    name: str
    alias: str | None = None
    created_at: int = 0
    completed_at: int | None = None

    @property
    def is_completed(self) -> bool:
        """True if the node carries a completion timestamp."""
        return self.completed_at is not None

    @property
    def has_date_name(self) -> bool:
        """True if the name is a calendar date (date node candidate)."""
        return is_date_name(self.name)

    def copy(self) -> TaskNode:
        """Return an unlinked copy of the record."""
        return replace(self)

    def completed_datetime(self) -> datetime | None:
        """Return completion time as local datetime, or None."""
        if self.completed_at is None:
            return None
        return datetime.fromtimestamp(self.completed_at)

    def completed_on(self, day: str, offset: int = 0) -> bool:
        """Check whether the node was completed on a given day.

        Args:
            day: Date string in YYYY-MM-DD format.
            offset: Hours after midnight at which the day starts.

        Returns:
            True if completion falls within [start, start + 24h).
        """
        completed = self.completed_datetime()
        if completed is None:
            return False
        start = datetime.strptime(day, DATE_FORMAT) + timedelta(hours=offset)
        end = start + timedelta(hours=24)
        return start <= completed < end

    def label(self) -> str:
        """Return the "(id)" or "(id:alias)" label."""
        if self.alias:
            return f"({self.id}:{self.alias})"
        return f"({self.id})"


@dataclass(frozen=True)
class Link:
    """A directed edge origin -> dest as stored in the links table."""

    id: int
    origin_id: int
    dest_id: int

    def __str__(self) -> str:
        return f"({self.origin_id}) -> ({self.dest_id})"
