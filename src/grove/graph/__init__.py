"""Graph module - In-memory multitree of tasks.

Exports:
- TaskNode: Identity and task-state record
- TaskStatus: Derived completion status
- Link: Persisted directed edge
- Multitree: Arena of records with id adjacency
- NodeRef: Handle for one node of an arena
- LinkExistsError / LinkNotFoundError: Adjacency mutation failures

Structural checks live in grove.graph.validate, completion propagation in
grove.graph.status.
"""

from grove.graph.multitree import LinkExistsError, LinkNotFoundError, Multitree, NodeRef
from grove.graph.node import Link, TaskNode, TaskStatus

__all__ = [
    "TaskNode",
    "TaskStatus",
    "Link",
    "Multitree",
    "NodeRef",
    "LinkExistsError",
    "LinkNotFoundError",
]
