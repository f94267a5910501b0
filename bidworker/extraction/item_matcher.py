"""Resolve an external item identifier to a position in an item list."""

import re
from collections.abc import Sequence

from bidworker.extraction.exceptions import ItemNotFoundError
from bidworker.extraction.models import DemolitionItem

_POSITIONAL_ID = re.compile(r"item_(\d+)")


def find_item_index(identifier: str, items: Sequence[DemolitionItem]) -> int | None:
    """Return the index of the item named by ``identifier`` or None.

    Tried in order: item number, persisted id, then ``item_<N>`` as a
    zero-based position within the current list. ``item_<N>`` follows the
    list order at read time, so it can point at a different item after the
    list has been reordered.
    """
    for index, item in enumerate(items):
        if item.item_number is not None and item.item_number == identifier:
            return index
    for index, item in enumerate(items):
        if item.id is not None and item.id == identifier:
            return index
    match = _POSITIONAL_ID.fullmatch(identifier)
    if match is not None:
        position = int(match.group(1))
        if position < len(items):
            return position
    return None


def require_item_index(identifier: str, items: Sequence[DemolitionItem]) -> int:
    """Like find_item_index but raises ItemNotFoundError on a miss."""
    index = find_item_index(identifier, items)
    if index is None:
        raise ItemNotFoundError(f"Item '{identifier}' not found")
    return index
