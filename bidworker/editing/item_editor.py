"""User edits to a persisted bid's demolition items.

Each operation reads the bid, changes the item list, re-resolves prices,
re-aggregates the summary over active items and writes everything back.
There is no locking: concurrent edits to the same bid are last-writer-wins
and only bump the advisory revision counter.
"""

from dataclasses import dataclass, replace
from typing import Any

from bidworker.database.repositories.bid_repository import BidRepository
from bidworker.editing.exceptions import EditError
from bidworker.extraction.categories import normalize_category
from bidworker.extraction.codec import (
    item_from_record,
    item_to_record,
    match_from_record,
    summary_to_record,
)
from bidworker.extraction.item_matcher import require_item_index
from bidworker.extraction.measurements import coerce_measurement
from bidworker.extraction.models import DemolitionItem, PricingSummary
from bidworker.extraction.numbers import parse_number
from bidworker.extraction.pricing import Margin, aggregate_pricing, apply_price, calculate_margin
from bidworker.logging.logger import Log

_TEXT_FIELDS = {
    "name": "name",
    "description": "description",
    "action": "action",
    "location": "location",
    "notes": "notes",
    "pricing": "pricing",
}


@dataclass(frozen=True)
class EditResult:
    """Outcome of one edit operation."""

    item: DemolitionItem | None
    pricing_summary: PricingSummary
    revision: int


class BidItemEditor:
    """Applies user edits to the items of a stored bid."""

    def __init__(self, bid_repo: BidRepository) -> None:
        self._bid_repo = bid_repo

    def get_items(
        self,
        bid_id: int,
        owner_id: int,
        include_inactive: bool = False,
    ) -> list[DemolitionItem]:
        items = self._load(bid_id, owner_id)
        if include_inactive:
            return items
        return [item for item in items if item.is_active]

    def update_item(
        self,
        bid_id: int,
        owner_id: int,
        identifier: str,
        changes: dict[str, Any],
    ) -> EditResult:
        """Apply a camelCase change set to one item and reprice it.

        Raises:
            ItemNotFoundError: if ``identifier`` matches no item.
            EditError: if a change is invalid.
        """
        items = self._load(bid_id, owner_id)
        index = require_item_index(identifier, items)
        items[index] = apply_price(_apply_changes(items[index], changes))
        return self._save(bid_id, items, items[index])

    def add_item(self, bid_id: int, owner_id: int, fields: dict[str, Any]) -> EditResult:
        """Append a new item built from camelCase fields.

        Raises:
            EditError: if ``name`` is missing.
        """
        name = fields.get("name")
        if not isinstance(name, str) or not name.strip():
            raise EditError("A new item needs a name")
        items = self._load(bid_id, owner_id)
        record = {**fields, "itemNumber": fields.get("itemNumber") or _next_item_number(items)}
        record.pop("id", None)
        item = apply_price(item_from_record(record, position=len(items)))
        items.append(item)
        return self._save(bid_id, items, item)

    def remove_item(self, bid_id: int, owner_id: int, identifier: str) -> EditResult:
        """Soft-delete an item; it stays stored with is_active=False.

        Raises:
            ItemNotFoundError: if ``identifier`` matches no item.
        """
        items = self._load(bid_id, owner_id)
        index = require_item_index(identifier, items)
        items[index] = replace(items[index], is_active=False)
        return self._save(bid_id, items, items[index])

    def update_item_proposed_bid(
        self,
        bid_id: int,
        owner_id: int,
        identifier: str,
        proposed_bid: object,
    ) -> EditResult:
        """Set the amount the user intends to bid for one item.

        Raises:
            ItemNotFoundError: if ``identifier`` matches no item.
            EditError: if ``proposed_bid`` is not a non-negative number.
        """
        amount = parse_number(proposed_bid)
        if amount is None or amount < 0:
            raise EditError(f"Proposed bid must be a non-negative number, got {proposed_bid!r}")
        items = self._load(bid_id, owner_id)
        index = require_item_index(identifier, items)
        items[index] = replace(items[index], proposed_bid=amount)
        return self._save(bid_id, items, items[index])

    def recalculate_prices(self, bid_id: int, owner_id: int) -> EditResult:
        """Re-resolve every item's price and rebuild the summary."""
        items = [apply_price(item) for item in self._load(bid_id, owner_id)]
        return self._save(bid_id, items, None)

    def item_margin(self, bid_id: int, owner_id: int, identifier: str) -> Margin:
        """Margin of an item's proposed bid over its calculated total."""
        items = self._load(bid_id, owner_id)
        item = items[require_item_index(identifier, items)]
        return calculate_margin(item.proposed_bid, item.calculated_total_price)

    def _load(self, bid_id: int, owner_id: int) -> list[DemolitionItem]:
        bid = self._bid_repo.find_by_id_and_owner(bid_id, owner_id)
        return [
            item_from_record(record, position=position)
            for position, record in enumerate(bid.demolition_items)
            if isinstance(record, dict)
        ]

    def _save(
        self,
        bid_id: int,
        items: list[DemolitionItem],
        item: DemolitionItem | None,
    ) -> EditResult:
        summary = aggregate_pricing([entry for entry in items if entry.is_active])
        revision = self._bid_repo.update_items(
            bid_id,
            [item_to_record(entry) for entry in items],
            summary_to_record(summary),
        )
        Log.info(
            f"Bid {bid_id} items updated (revision {revision}): "
            f"total {summary.total_calculated_cost:.2f}"
        )
        return EditResult(item=item, pricing_summary=summary, revision=revision)


def _apply_changes(item: DemolitionItem, changes: dict[str, Any]) -> DemolitionItem:
    updates: dict[str, Any] = {}
    for key, attribute in _TEXT_FIELDS.items():
        if key in changes:
            value = changes[key]
            if value is not None and not isinstance(value, str):
                raise EditError(f"'{key}' must be a string")
            if key == "name" and not (value or "").strip():
                raise EditError("'name' must not be empty")
            updates[attribute] = value.strip() if isinstance(value, str) else None
    if "description" in updates and updates["description"] is None:
        updates["description"] = ""
    if "category" in changes:
        updates["category"] = normalize_category(changes["category"])
    if "measurements" in changes:
        updates["measurements"] = coerce_measurement(changes["measurements"])
    for key, attribute in (("unitPrice", "unit_price"), ("totalPrice", "total_price")):
        if key in changes:
            updates[attribute] = _optional_amount(key, changes[key])
    if "pricesheetMatch" in changes:
        updates["pricesheet_match"] = match_from_record(changes["pricesheetMatch"])
    if "isActive" in changes:
        updates["is_active"] = bool(changes["isActive"])
    return replace(item, **updates)


def _optional_amount(key: str, value: object) -> float | None:
    if value is None or value == "":
        return None
    amount = parse_number(value)
    if amount is None or amount < 0:
        raise EditError(f"'{key}' must be a non-negative number, got {value!r}")
    return amount


def _next_item_number(items: list[DemolitionItem]) -> str:
    numbers = [parse_number(item.item_number) for item in items]
    highest = max((int(number) for number in numbers if number is not None), default=0)
    return str(highest + 1)
