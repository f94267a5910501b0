"""Per-item price resolution and bid-level aggregation."""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from bidworker.extraction.exceptions import CalculationError
from bidworker.extraction.measurements import measurement_type
from bidworker.extraction.models import (
    DemolitionItem,
    PriceCalculation,
    PriceCatalogEntry,
    PricingSummary,
)
from bidworker.extraction.numbers import parse_number, positive_or_none, resolve_quantity
from bidworker.logging.logger import Log


@dataclass(frozen=True)
class Margin:
    """Difference between a proposed bid and the calculated cost."""

    margin: float = 0.0
    margin_percentage: float = 0.0
    is_valid: bool = False
    error: str | None = None


def resolve_price(
    item: DemolitionItem,
    catalog_entry: PriceCatalogEntry | None = None,
) -> PriceCalculation:
    """Compute an item's unit and total price.

    The first positive unit price wins, in this order:
    catalog price (pricesheet), explicit unit price (manual), free-text
    pricing (ai_extracted), total price divided by quantity (ai_extracted).
    Without any, the unit price is 0 and the result is not valid.

    Pure: ``last_calculated`` is left unset.

    Raises:
        CalculationError: if a price field holds an unusable value or the
            arithmetic leaves the finite range.
    """
    quantity = resolve_quantity(item.measurements)
    unit_price, method = _resolve_unit_price(item, catalog_entry, quantity)
    total_price = quantity * unit_price if quantity > 0 and unit_price > 0 else 0.0
    if not math.isfinite(total_price):
        raise CalculationError(
            f"Total price for '{item.name}' is not finite ({quantity} x {unit_price})"
        )
    return PriceCalculation(
        quantity=quantity,
        unit_price=unit_price,
        total_price=total_price,
        calculation_method=method,
        has_valid_price=unit_price > 0,
        measurement_type=measurement_type(item.measurements),
    )


def apply_price(
    item: DemolitionItem,
    catalog_entry: PriceCatalogEntry | None = None,
) -> DemolitionItem:
    """Return ``item`` with its derived price fields recomputed.

    A CalculationError zeroes the item's prices and tags the calculation
    as ``error`` instead of propagating.
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        calculation = resolve_price(item, catalog_entry)
    except CalculationError as exc:
        Log.warning(f"Price calculation failed for '{item.name}': {exc}")
        calculation = PriceCalculation(
            quantity=resolve_quantity(item.measurements),
            calculation_method="error",
            has_valid_price=False,
            measurement_type=measurement_type(item.measurements),
            error=str(exc),
        )
    return replace(
        item,
        calculated_unit_price=calculation.unit_price,
        calculated_total_price=calculation.total_price,
        price_calculation=replace(calculation, last_calculated=timestamp),
    )


def aggregate_pricing(items: list[DemolitionItem]) -> PricingSummary:
    """Roll item prices up into a PricingSummary.

    The total is the sum of calculated_total_price over items with a valid
    price and does not depend on item order.
    """
    valid_totals: list[float] = []
    with_prices = 0
    with_match = 0
    without_prices = 0
    with_errors = 0
    for item in items:
        calculation = item.price_calculation
        if calculation is not None and calculation.calculation_method == "error":
            with_errors += 1
        elif calculation is not None and calculation.has_valid_price:
            with_prices += 1
            valid_totals.append(item.calculated_total_price)
            if calculation.calculation_method == "pricesheet":
                with_match += 1
        else:
            without_prices += 1
    return PricingSummary(
        total_calculated_cost=math.fsum(valid_totals),
        items_with_prices=with_prices,
        items_with_pricesheet_match=with_match,
        items_without_prices=without_prices,
        items_with_errors=with_errors,
    )


def calculate_margin(proposed_bid: object, calculated_cost: object) -> Margin:
    """Margin of a proposed bid over the calculated cost, in money and percent."""
    bid = parse_number(proposed_bid) or 0.0
    cost = parse_number(calculated_cost) or 0.0
    if cost == 0:
        return Margin(error="Cannot calculate margin when calculated cost is zero")
    margin = bid - cost
    return Margin(margin=margin, margin_percentage=margin / cost * 100, is_valid=True)


def _resolve_unit_price(
    item: DemolitionItem,
    catalog_entry: PriceCatalogEntry | None,
    quantity: float,
) -> tuple[float, str]:
    catalog_price = _checked(catalog_entry.price if catalog_entry else None, "catalog price")
    if catalog_price is None and item.pricesheet_match.matched:
        catalog_price = _checked(item.pricesheet_match.item_price, "pricesheet match price")
    if catalog_price is not None:
        return catalog_price, "pricesheet"

    unit_price = _checked(item.unit_price, "unit price")
    if unit_price is not None:
        return unit_price, "manual"

    extracted = _checked(item.pricing, "pricing")
    if extracted is not None:
        return extracted, "ai_extracted"

    total_price = _checked(item.total_price, "total price")
    if total_price is not None and quantity > 0:
        derived = total_price / quantity
        if not math.isfinite(derived):
            raise CalculationError(f"Unit price for '{item.name}' is not finite")
        if derived > 0:
            return derived, "ai_extracted"

    return 0.0, "manual"


def _checked(value: object, label: str) -> float | None:
    """Positive number from ``value``; None when absent or not positive."""
    if value is None or isinstance(value, str):
        return positive_or_none(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CalculationError(f"Unsupported {label} value: {value!r}")
    if not math.isfinite(value):
        raise CalculationError(f"Non-finite {label}: {value!r}")
    return float(value) if value > 0 else None
