"""
grove.commands - CLI command implementations
"""

__all__ = [
    "add",
    "alias",
    "check",
    "completion",
    "import_cmd",
    "link",
    "list_cmd",
    "remove",
    "rename",
    "stat",
    "tree",
]
