"""Name, date-name and alias validation rules."""

from __future__ import annotations

import re
from datetime import date, datetime

from grove.errors import InvalidName

MAX_NAME_LENGTH = 100
MAX_ALIAS_LENGTH = 100
DATE_FORMAT = "%Y-%m-%d"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ALIAS_RE = re.compile(r"^\S+$")


def is_date_name(name: str) -> bool:
    """Return True if name is a real calendar date in YYYY-MM-DD form."""
    if not name or not _DATE_RE.match(name):
        return False
    try:
        datetime.strptime(name, DATE_FORMAT)
    except ValueError:
        return False
    return True


def today_name(today: date | None = None) -> str:
    """Return the date-node name for today (or the given day)."""
    return (today or date.today()).strftime(DATE_FORMAT)


def validate_date_node_name(name: str) -> None:
    """Raise InvalidName unless name is a valid date-node name."""
    if not name:
        raise InvalidName("invalid date node name: empty string")
    if not is_date_name(name):
        raise InvalidName(f"invalid date node name: {name}")


def validate_node_name(name: str) -> None:
    """Raise InvalidName for empty, over-long or reserved names.

    Date names are reserved for auto-managed date nodes.
    """
    if is_date_name(name):
        raise InvalidName(f"{name} is a reserved name")
    if len(name) == 0:
        raise InvalidName("invalid node name (empty name)")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidName("invalid node name (name too long)")


def validate_alias(alias: str) -> None:
    """Raise InvalidName unless alias can serve as a selector.

    Aliases may not be empty, purely numeric (would shadow ids), dates
    (would shadow date nodes), or contain whitespace.
    """
    if len(alias) == 0:
        raise InvalidName("invalid alias (empty)")
    if len(alias) > MAX_ALIAS_LENGTH:
        raise InvalidName("invalid alias (too long)")
    if alias.isdigit():
        raise InvalidName("invalid alias (numeric)")
    if is_date_name(alias):
        raise InvalidName("invalid alias (date)")
    if not _ALIAS_RE.match(alias):
        raise InvalidName("invalid alias (contains whitespace)")


def is_valid_alias(alias: str) -> bool:
    """Non-raising form of validate_alias."""
    try:
        validate_alias(alias)
    except InvalidName:
        return False
    return True
