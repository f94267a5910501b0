from bidworker.extraction.codec import (
    item_from_record,
    item_to_record,
    metadata_to_record,
    result_to_record,
)
from bidworker.extraction.models import (
    BidExtractionResult,
    ContractorInfo,
    DemolitionItem,
    DocumentMetadata,
    Measurement,
    PriceCalculation,
    PricesheetMatch,
    PricingSummary,
    ProcessingPhases,
)


def _make_item() -> DemolitionItem:
    return DemolitionItem(
        id="abc",
        item_number="3",
        name="Drywall partition",
        category="wall",
        measurements=Measurement(linear_feet=75, unit="LF"),
        pricesheet_match=PricesheetMatch(
            matched=True, item_name="Drywall removal", item_price=2.5, item_id="7"
        ),
        calculated_unit_price=2.5,
        calculated_total_price=187.5,
        price_calculation=PriceCalculation(
            quantity=75,
            unit_price=2.5,
            total_price=187.5,
            calculation_method="pricesheet",
            has_valid_price=True,
            measurement_type="linear",
            last_calculated="2024-01-01T00:00:00+00:00",
        ),
    )


class TestItemRecords:
    def test_camel_case_keys(self) -> None:
        record = item_to_record(_make_item())
        assert record["itemNumber"] == "3"
        assert record["measurements"]["linearFeet"] == 75
        assert record["pricesheetMatch"]["itemId"] == "7"
        assert record["priceCalculation"]["calculationMethod"] == "pricesheet"
        assert record["isActive"] is True
        assert "error" not in record["priceCalculation"]

    def test_reads_back_stored_item(self) -> None:
        item = _make_item()
        assert item_from_record(item_to_record(item)) == item

    def test_lenient_defaults(self) -> None:
        item = item_from_record({"category": "Flooring", "unitPrice": "$4.00"}, position=4)
        assert item.item_number == "5"
        assert item.name == "Item 5"
        assert item.category == "floor"
        assert item.unit_price == 4.0
        assert item.pricesheet_match.matched is False
        assert item.price_calculation is None
        assert item.is_active is True

    def test_numeric_item_number(self) -> None:
        assert item_from_record({"name": "x", "itemNumber": 7}).item_number == "7"

    def test_inactive_flag(self) -> None:
        assert item_from_record({"name": "x", "isActive": False}).is_active is False

    def test_measurement_text_accepted(self) -> None:
        item = item_from_record({"name": "x", "measurements": "300 SF"})
        assert item.measurements.square_feet == 300.0


class TestResultRecord:
    def test_shape(self) -> None:
        result = BidExtractionResult(
            success=True,
            method="multi-phase",
            metadata=DocumentMetadata(contractor_info=ContractorInfo(company_name="ACME")),
            demolition_items=[_make_item()],
            pricing_summary=PricingSummary(total_calculated_cost=187.5, items_with_prices=1),
            processing_phases=ProcessingPhases(True, True, True),
            extraction_notes="Extraction completed successfully",
        )
        record = result_to_record(result)
        assert record["contractorInfo"]["companyName"] == "ACME"
        assert record["totalItems"] == 1
        assert len(record["demolitionItems"]) == 1
        assert record["pricingSummary"]["totalCalculatedCost"] == 187.5
        assert record["processingPhases"] == {
            "phase1Success": True,
            "phase2ASuccess": True,
            "phase2BSuccess": True,
        }

    def test_without_items(self) -> None:
        result = BidExtractionResult(success=False, method="failed")
        record = result_to_record(result, include_items=False)
        assert "demolitionItems" not in record
        assert record["totalItems"] == 0


class TestMetadataRecord:
    def test_nested_keys(self) -> None:
        record = metadata_to_record(DocumentMetadata(basic_item_count=4))
        assert record["basicItemCount"] == 4
        assert record["scopeOfWork"] == {"itemsToRemove": [], "itemsToRemain": []}
        assert record["priceInfo"] == {"totalAmount": None, "includes": []}
