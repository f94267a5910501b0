"""Conversion between extraction models and camelCase JSON records.

Records are what gets stored in the bid row and what edit operations
receive; reading them back is lenient because stored data may predate
the current shape.
"""

from dataclasses import asdict
from typing import Any

from bidworker.extraction.categories import normalize_category
from bidworker.extraction.measurements import coerce_measurement
from bidworker.extraction.models import (
    BidExtractionResult,
    DemolitionItem,
    DocumentMetadata,
    Measurement,
    PriceCalculation,
    PricesheetMatch,
    PricingSummary,
)
from bidworker.extraction.numbers import parse_number


def measurement_to_record(measurement: Measurement) -> dict[str, Any]:
    return {
        "quantity": measurement.quantity,
        "unit": measurement.unit,
        "squareFeet": measurement.square_feet,
        "linearFeet": measurement.linear_feet,
        "count": measurement.count,
        "dimensions": measurement.dimensions,
    }


def match_to_record(match: PricesheetMatch) -> dict[str, Any]:
    return {
        "matched": match.matched,
        "itemName": match.item_name,
        "itemPrice": match.item_price,
        "itemId": match.item_id,
    }


def match_from_record(raw: object) -> PricesheetMatch:
    if not isinstance(raw, dict) or not raw.get("matched"):
        return PricesheetMatch()
    return PricesheetMatch(
        matched=True,
        item_name=_optional_text(raw.get("itemName")),
        item_price=parse_number(raw.get("itemPrice")),
        item_id=_optional_text(raw.get("itemId")),
    )


def calculation_to_record(calculation: PriceCalculation | None) -> dict[str, Any] | None:
    if calculation is None:
        return None
    record: dict[str, Any] = {
        "quantity": calculation.quantity,
        "unitPrice": calculation.unit_price,
        "totalPrice": calculation.total_price,
        "calculationMethod": calculation.calculation_method,
        "hasValidPrice": calculation.has_valid_price,
        "measurementType": calculation.measurement_type,
        "lastCalculated": calculation.last_calculated,
    }
    if calculation.error is not None:
        record["error"] = calculation.error
    return record


def calculation_from_record(raw: object) -> PriceCalculation | None:
    if not isinstance(raw, dict):
        return None
    return PriceCalculation(
        quantity=parse_number(raw.get("quantity")) or 0.0,
        unit_price=parse_number(raw.get("unitPrice")) or 0.0,
        total_price=parse_number(raw.get("totalPrice")) or 0.0,
        calculation_method=str(raw.get("calculationMethod") or "manual"),
        has_valid_price=bool(raw.get("hasValidPrice")),
        measurement_type=str(raw.get("measurementType") or "unknown"),
        last_calculated=_optional_text(raw.get("lastCalculated")),
        error=_optional_text(raw.get("error")),
    )


def item_to_record(item: DemolitionItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "itemNumber": item.item_number,
        "name": item.name,
        "description": item.description,
        "category": item.category,
        "action": item.action,
        "location": item.location,
        "notes": item.notes,
        "measurements": measurement_to_record(item.measurements),
        "pricing": item.pricing,
        "unitPrice": item.unit_price,
        "totalPrice": item.total_price,
        "pricesheetMatch": match_to_record(item.pricesheet_match),
        "calculatedUnitPrice": item.calculated_unit_price,
        "calculatedTotalPrice": item.calculated_total_price,
        "proposedBid": item.proposed_bid,
        "priceCalculation": calculation_to_record(item.price_calculation),
        "isActive": item.is_active,
    }


def item_from_record(raw: dict[str, Any], position: int = 0) -> DemolitionItem:
    """Build an item from a record; ``position`` numbers items lacking itemNumber."""
    item_number = _optional_text(raw.get("itemNumber"))
    return DemolitionItem(
        id=_optional_text(raw.get("id")),
        item_number=item_number if item_number is not None else str(position + 1),
        name=_optional_text(raw.get("name")) or f"Item {position + 1}",
        description=_optional_text(raw.get("description")) or "",
        category=normalize_category(raw.get("category")),
        action=_optional_text(raw.get("action")) or "remove",
        location=_optional_text(raw.get("location")),
        notes=_optional_text(raw.get("notes")),
        measurements=coerce_measurement(raw.get("measurements")),
        pricing=_optional_text(raw.get("pricing")),
        unit_price=parse_number(raw.get("unitPrice")),
        total_price=parse_number(raw.get("totalPrice")),
        pricesheet_match=match_from_record(raw.get("pricesheetMatch")),
        calculated_unit_price=parse_number(raw.get("calculatedUnitPrice")) or 0.0,
        calculated_total_price=parse_number(raw.get("calculatedTotalPrice")) or 0.0,
        proposed_bid=parse_number(raw.get("proposedBid")),
        price_calculation=calculation_from_record(raw.get("priceCalculation")),
        is_active=raw.get("isActive", True) is not False,
    )


def summary_to_record(summary: PricingSummary) -> dict[str, Any]:
    return {
        "totalCalculatedCost": summary.total_calculated_cost,
        "itemsWithPrices": summary.items_with_prices,
        "itemsWithPricesheetMatch": summary.items_with_pricesheet_match,
        "itemsWithoutPrices": summary.items_without_prices,
        "itemsWithErrors": summary.items_with_errors,
    }


def metadata_to_record(metadata: DocumentMetadata) -> dict[str, Any]:
    return {
        "contractorInfo": _camel_keys(asdict(metadata.contractor_info)),
        "clientInfo": _camel_keys(asdict(metadata.client_info)),
        "projectDetails": _camel_keys(asdict(metadata.project_details)),
        "scopeOfWork": _camel_keys(asdict(metadata.scope_of_work)),
        "basicItemCount": metadata.basic_item_count,
        "sectionHeaders": list(metadata.section_headers),
        "specialNotes": list(metadata.special_notes),
        "priceInfo": _camel_keys(asdict(metadata.price_info)),
        "exclusions": list(metadata.exclusions),
        "additionalConditions": list(metadata.additional_conditions),
    }


def result_to_record(
    result: BidExtractionResult,
    include_items: bool = True,
) -> dict[str, Any]:
    """Extraction result as a record.

    The bid row keeps items in their own column, so persistence passes
    ``include_items=False``.
    """
    record = metadata_to_record(result.metadata)
    if include_items:
        record["demolitionItems"] = [item_to_record(item) for item in result.demolition_items]
    record.update({
        "success": result.success,
        "method": result.method,
        "totalItems": result.total_items,
        "pricingSummary": summary_to_record(result.pricing_summary),
        "processingPhases": {
            "phase1Success": result.processing_phases.phase1_success,
            "phase2ASuccess": result.processing_phases.phase2a_success,
            "phase2BSuccess": result.processing_phases.phase2b_success,
        },
        "extractionNotes": result.extraction_notes,
    })
    return record


def _camel_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {_camel(key): value for key, value in data.items()}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
