"""Node selectors.

A selector is what a user types to point at a node: a numeric id, a
date-node name, or an alias. Text is parsed once, at the boundary, into
one of three variants; everything behind the boundary works with the
variant only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from grove.errors import InvalidSelector
from grove.graph.names import is_date_name, is_valid_alias


@dataclass(frozen=True)
class ById:
    """Select a node by its storage id."""

    id: int

    def __str__(self) -> str:
        return str(self.id)


@dataclass(frozen=True)
class ByName:
    """Select a date node by its name (YYYY-MM-DD)."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ByAlias:
    """Select a node by its alias."""

    alias: str

    def __str__(self) -> str:
        return self.alias


Selector = Union[ById, ByName, ByAlias]


def parse_selector(value: str | int | Selector) -> Selector:
    """Turn user input into a selector variant.

    Positive integers select by id, valid calendar dates by name, and any
    other valid alias by alias.

    Raises:
        InvalidSelector: If value matches none of the three forms.
    """
    if isinstance(value, (ById, ByName, ByAlias)):
        return value
    if isinstance(value, int):
        if value > 0:
            return ById(value)
        raise InvalidSelector(f"invalid selector: {value}")

    text = value.strip()
    if text.isascii() and text.isdigit():
        node_id = int(text)
        if node_id > 0:
            return ById(node_id)
        raise InvalidSelector(f"invalid selector: {value}")
    if is_date_name(text):
        return ByName(text)
    if is_valid_alias(text):
        return ByAlias(text)
    raise InvalidSelector(f"invalid selector: {value}")
