"""Phase 2B: attach measurements to the identified items and price them.

Primary path, three steps:
  raw        the model copies each item line's measurement text verbatim
  normalize  measurement text is parsed locally into Measurements
  align      normalized measurements are matched back to items by name

When any step yields nothing usable the orchestrator calls run_fallback,
which asks the model for all measurements in one structured reply.
"""

import json
import re
from dataclasses import replace
from pathlib import Path
from typing import Any

from bidworker.extraction.catalog_matching import find_catalog_entry
from bidworker.extraction.exceptions import ExtractionError, UpstreamFormatError
from bidworker.extraction.extractor import Extractor
from bidworker.extraction.measurements import coerce_measurement, normalize_measurement
from bidworker.extraction.models import (
    DemolitionItem,
    Measurement,
    NormalizedMeasurement,
    PhaseResult,
    PriceCatalogEntry,
    RawMeasurement,
)
from bidworker.extraction.numbers import parse_number
from bidworker.extraction.preparers import PreparedDocument
from bidworker.extraction.pricing import apply_price
from bidworker.extraction.prompt_loader import load_prompt_template
from bidworker.extraction.validator import build_raw_measurements
from bidworker.logging.logger import Log

_MIN_NAME_SCORE = 0.5
_WORD = re.compile(r"[a-z0-9]+")


class Phase2MeasurementExtractor:
    """Fills measurements and prices for the items found in Phase 2A."""

    def __init__(self, extractor: Extractor, prompt_dir: Path | None = None) -> None:
        self._extractor = extractor
        self._raw_template = load_prompt_template("phase2_raw_measurements", prompt_dir)
        self._fallback_template = load_prompt_template("phase2_fallback_measurements", prompt_dir)

    async def run(
        self,
        document: PreparedDocument,
        items: list[DemolitionItem],
        catalog: list[PriceCatalogEntry],
    ) -> PhaseResult:
        """Primary path. Payload on success is the priced item list."""
        try:
            raw = await self._extract_raw(document, items)
        except ExtractionError as exc:
            Log.warning(f"Raw measurement extraction failed: {exc}")
            return PhaseResult(success=False, error=f"Raw measurement extraction failed: {exc}")
        Log.info(f"Raw measurement extraction returned {len(raw)} lines")

        normalized = normalize_raw_measurements(raw)
        recognized = sum(1 for entry in normalized if entry.measurement.unit is not None)
        if recognized == 0:
            Log.warning("No raw measurement had a recognizable unit")
            return PhaseResult(success=False, error="No measurement with a recognizable unit")

        aligned, matched = align_measurements(items, normalized)
        if matched == 0:
            Log.warning("No measurement could be aligned to an item")
            return PhaseResult(success=False, error="No measurement matched any item")

        Log.info(f"Aligned measurements to {matched} of {len(items)} items")
        return PhaseResult(success=True, payload=price_items(aligned, catalog))

    async def run_fallback(
        self,
        document: PreparedDocument,
        items: list[DemolitionItem],
        catalog: list[PriceCatalogEntry],
    ) -> PhaseResult:
        """Single-call fallback. Payload on success is the priced item list."""
        prompt = self._fallback_template.format(items_context=_items_context(items))
        try:
            data = await self._extractor.call_and_parse(prompt, document)
            fallback_items = data.get("demolitionItems")
            if not isinstance(fallback_items, list) or not fallback_items:
                raise UpstreamFormatError("Fallback response has no demolitionItems")
        except ExtractionError as exc:
            Log.warning(f"Fallback measurement extraction failed: {exc}")
            return PhaseResult(
                success=False, error=f"Fallback measurement extraction failed: {exc}"
            )

        merged = merge_fallback_items(items, fallback_items)
        Log.info(
            f"Fallback measurement extraction returned {len(fallback_items)} items "
            f"for {len(items)} identified items"
        )
        return PhaseResult(success=True, payload=price_items(merged, catalog))

    async def _extract_raw(
        self,
        document: PreparedDocument,
        items: list[DemolitionItem],
    ) -> list[RawMeasurement]:
        item_names = "\n".join(f"- {item.name}" for item in items)
        data = await self._extractor.call_and_parse(
            self._raw_template.format(item_names=item_names), document
        )
        raw = build_raw_measurements(data)
        if not raw:
            raise UpstreamFormatError("Raw measurement list is empty")
        return raw


def normalize_raw_measurements(raw: list[RawMeasurement]) -> list[NormalizedMeasurement]:
    return [
        NormalizedMeasurement(
            item=entry.item,
            measurement=normalize_measurement(entry.measurement_text),
        )
        for entry in raw
    ]


def align_measurements(
    items: list[DemolitionItem],
    normalized: list[NormalizedMeasurement],
) -> tuple[list[DemolitionItem], int]:
    """Attach measurements to items, returning the items and how many got one.

    Each item, in order, takes the unused measurement whose name scores
    highest against its own (exact 1.0, containment 0.9, otherwise word
    overlap), ignoring scores below 0.5. When both lists have the same
    length, items left over take the measurement at their own position.
    """
    assigned: dict[int, Measurement] = {}
    used: set[int] = set()
    for index, item in enumerate(items):
        best_score = 0.0
        best_position: int | None = None
        for position, entry in enumerate(normalized):
            if position in used:
                continue
            score = name_score(item.name, entry.item)
            if score > best_score:
                best_score = score
                best_position = position
        if best_position is not None and best_score >= _MIN_NAME_SCORE:
            assigned[index] = normalized[best_position].measurement
            used.add(best_position)

    if len(normalized) == len(items):
        for index in range(len(items)):
            if index not in assigned and index not in used:
                assigned[index] = normalized[index].measurement
                used.add(index)

    aligned = [
        replace(item, measurements=assigned[index]) if index in assigned else item
        for index, item in enumerate(items)
    ]
    return aligned, len(assigned)


def name_score(left: str, right: str) -> float:
    a = " ".join(_WORD.findall(left.lower()))
    b = " ".join(_WORD.findall(right.lower()))
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if a in b or b in a:
        return 0.9
    words_a = set(a.split())
    words_b = set(b.split())
    return len(words_a & words_b) / len(words_a | words_b)


def merge_fallback_items(
    items: list[DemolitionItem],
    fallback_items: list[Any],
) -> list[DemolitionItem]:
    """Give item ``i`` the measurements and prices of fallback item ``i``.

    Identity (name, category, catalog match) stays with the Phase 2A item.
    Extra fallback items are ignored.
    """
    merged = []
    for index, item in enumerate(items):
        raw = fallback_items[index] if index < len(fallback_items) else None
        if not isinstance(raw, dict):
            merged.append(item)
            continue
        measurements = raw.get("measurements")
        if measurements is None:
            measurements = raw.get("measurementText")
        unit_price = item.unit_price
        if unit_price is None:
            unit_price = parse_number(raw.get("unitPrice"))
        total_price = item.total_price
        if total_price is None:
            total_price = parse_number(raw.get("totalPrice"))
        merged.append(replace(
            item,
            measurements=coerce_measurement(measurements),
            pricing=item.pricing or _text_or_none(raw.get("pricing")),
            unit_price=unit_price,
            total_price=total_price,
        ))
    return merged


def price_items(
    items: list[DemolitionItem],
    catalog: list[PriceCatalogEntry],
) -> list[DemolitionItem]:
    """Resolve every item's price against the catalog snapshot."""
    priced = []
    for item in items:
        entry = find_catalog_entry(item.pricesheet_match, catalog)
        priced_item = apply_price(item, entry)
        calculation = priced_item.price_calculation
        if calculation is not None and calculation.has_valid_price:
            Log.info(
                f"Priced '{item.name}': {calculation.quantity} x {calculation.unit_price} "
                f"= {calculation.total_price} ({calculation.calculation_method})"
            )
        else:
            Log.warning(f"No valid price for '{item.name}'")
        priced.append(priced_item)
    return priced


def _items_context(items: list[DemolitionItem]) -> str:
    return json.dumps(
        [
            {
                "itemNumber": item.item_number,
                "name": item.name,
                "category": item.category,
                "description": item.description,
            }
            for item in items
        ],
        indent=2,
    )


def _text_or_none(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
