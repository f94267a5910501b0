"""Builds domain models from parsed model payloads.

Model output is untrusted: wrong types are coerced or dropped, unknown
categories become "other" and unknown units become None. Nothing here
raises for bad values; only a missing top-level list is reported, as
UpstreamFormatError, because the phase has then produced nothing usable.
"""

from dataclasses import replace
from typing import Any

from bidworker.extraction.catalog_matching import find_catalog_entry, match_from_entry
from bidworker.extraction.codec import item_from_record, match_from_record
from bidworker.extraction.exceptions import UpstreamFormatError
from bidworker.extraction.models import (
    ClientInfo,
    ContractorInfo,
    DemolitionItem,
    DocumentMetadata,
    PriceCatalogEntry,
    PriceInfo,
    PricesheetMatch,
    ProjectDetails,
    RawMeasurement,
    ScopeOfWork,
)
from bidworker.extraction.numbers import parse_number

_MAX_ITEMS = 500


def build_metadata(data: dict[str, Any]) -> DocumentMetadata:
    contractor = _object(data.get("contractorInfo"))
    client = _object(data.get("clientInfo"))
    project = _object(data.get("projectDetails"))
    scope = _object(data.get("scopeOfWork"))
    price_info = _object(data.get("priceInfo"))
    count = parse_number(data.get("basicItemCount"))
    return DocumentMetadata(
        contractor_info=ContractorInfo(
            company_name=_text(contractor.get("companyName")),
            contact_person=_text(contractor.get("contactPerson")),
            address=_text(contractor.get("address")),
            phone=_text(contractor.get("phone")),
            email=_text(contractor.get("email")),
            license=_text(contractor.get("license")),
        ),
        client_info=ClientInfo(
            company_name=_text(client.get("companyName") or client.get("clientName")),
            contact_person=_text(client.get("contactPerson")),
            address=_text(client.get("address") or client.get("clientAddress")),
            phone=_text(client.get("phone")),
            email=_text(client.get("email")),
        ),
        project_details=ProjectDetails(
            project_name=_text(project.get("projectName")),
            project_type=_text(project.get("projectType")),
            document_type=_text(project.get("documentType")),
            location=_text(project.get("location")),
            bid_date=_text(project.get("bidDate")),
            description=_text(project.get("description")),
        ),
        scope_of_work=ScopeOfWork(
            items_to_remove=_text_list(scope.get("itemsToRemove")),
            items_to_remain=_text_list(scope.get("itemsToRemain")),
        ),
        basic_item_count=int(count) if count is not None and count > 0 else 0,
        section_headers=_text_list(data.get("sectionHeaders")),
        special_notes=_text_list(data.get("specialNotes")),
        price_info=PriceInfo(
            total_amount=parse_number(price_info.get("totalAmount")),
            includes=_text_list(price_info.get("includes")),
        ),
        exclusions=_text_list(data.get("exclusions")),
        additional_conditions=_text_list(data.get("additionalConditions")),
    )


def build_items(
    data: dict[str, Any],
    catalog: list[PriceCatalogEntry],
) -> list[DemolitionItem]:
    """Build the identified items of a ``demolitionItems`` payload.

    A catalog match claimed by the model is kept only if it names a real
    catalog entry; price and id are then taken from the catalog.

    Raises:
        UpstreamFormatError: if ``demolitionItems`` is missing or not a list.
    """
    raw_items = _require_list(data, "demolitionItems")
    items = []
    for raw in raw_items[:_MAX_ITEMS]:
        if not isinstance(raw, dict) or not _text(raw.get("name")):
            continue
        item = item_from_record(raw, position=len(items))
        items.append(_with_verified_match(item, raw, catalog))
    return items


def build_raw_measurements(data: dict[str, Any]) -> list[RawMeasurement]:
    """Raises UpstreamFormatError if ``rawMeasurements`` is missing or not a list."""
    if data.get("success") is False:
        raise UpstreamFormatError(
            f"Raw measurement extraction reported failure: {data.get('error', 'no reason given')}"
        )
    entries = []
    for raw in _require_list(data, "rawMeasurements"):
        if not isinstance(raw, dict):
            continue
        item = _text(raw.get("item"))
        text = _text(raw.get("measurementText"))
        if item and text:
            entries.append(RawMeasurement(item=item, measurement_text=text))
    return entries


def _with_verified_match(
    item: DemolitionItem,
    raw: dict[str, Any],
    catalog: list[PriceCatalogEntry],
) -> DemolitionItem:
    claimed = match_from_record(raw.get("pricesheetMatch"))
    entry = find_catalog_entry(claimed, catalog)
    match = match_from_entry(entry) if entry is not None else PricesheetMatch()
    return replace(item, pricesheet_match=match)


def _require_list(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if not isinstance(value, list):
        raise UpstreamFormatError(f"Response has no '{key}' list")
    return value


def _object(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _text_list(value: object) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [entry.strip() for entry in value if isinstance(entry, str) and entry.strip()]
