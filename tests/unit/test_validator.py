import pytest

from bidworker.extraction.exceptions import UpstreamFormatError
from bidworker.extraction.models import PriceCatalogEntry, RawMeasurement
from bidworker.extraction.validator import build_items, build_metadata, build_raw_measurements

_CATALOG = [PriceCatalogEntry(name="Drywall removal", price=2.5, category="wall", id="7")]


class TestBuildMetadata:
    def test_full_payload(self) -> None:
        metadata = build_metadata({
            "contractorInfo": {"companyName": "ACME Demolition", "license": "CA-123"},
            "clientInfo": {"clientName": "Northwind"},
            "projectDetails": {"projectName": "Suite 200 TI", "bidDate": "2024-03-01"},
            "scopeOfWork": {"itemsToRemove": ["Drywall", ""], "itemsToRemain": "Ceiling grid"},
            "basicItemCount": "3",
            "exclusions": ["Asbestos abatement", 4],
            "priceInfo": {"totalAmount": "$12,500", "includes": ["Haul-off"]},
        })
        assert metadata.contractor_info.company_name == "ACME Demolition"
        assert metadata.contractor_info.license == "CA-123"
        assert metadata.client_info.company_name == "Northwind"
        assert metadata.project_details.bid_date == "2024-03-01"
        assert metadata.scope_of_work.items_to_remove == ["Drywall"]
        assert metadata.scope_of_work.items_to_remain == ["Ceiling grid"]
        assert metadata.basic_item_count == 3
        assert metadata.exclusions == ["Asbestos abatement"]
        assert metadata.price_info.total_amount == 12500.0

    def test_garbage_is_tolerated(self) -> None:
        metadata = build_metadata({"contractorInfo": "ACME", "basicItemCount": -2})
        assert metadata.contractor_info.company_name is None
        assert metadata.basic_item_count == 0


class TestBuildItems:
    def test_builds_items(self) -> None:
        items = build_items(
            {
                "demolitionItems": [
                    {"itemNumber": "1", "name": "Drywall partition", "category": "Walls"},
                    {"name": "Carpet flooring", "measurements": {"squareFeet": 1200}},
                ]
            },
            _CATALOG,
        )
        assert [i.name for i in items] == ["Drywall partition", "Carpet flooring"]
        assert items[0].category == "wall"
        assert items[1].item_number == "2"
        assert items[1].measurements.unit == "SF"

    def test_skips_nameless_entries(self) -> None:
        items = build_items({"demolitionItems": [{"name": ""}, "junk", {"name": "Door"}]}, [])
        assert [i.name for i in items] == ["Door"]
        assert items[0].item_number == "1"

    def test_claimed_match_verified_against_catalog(self) -> None:
        items = build_items(
            {
                "demolitionItems": [
                    {
                        "name": "Drywall partition",
                        "pricesheetMatch": {
                            "matched": True,
                            "itemName": "drywall removal",
                            "itemPrice": 99,
                        },
                    },
                    {
                        "name": "Roof",
                        "pricesheetMatch": {"matched": True, "itemName": "Roof tear-off"},
                    },
                ]
            },
            _CATALOG,
        )
        assert items[0].pricesheet_match.item_price == 2.5
        assert items[0].pricesheet_match.item_id == "7"
        assert items[1].pricesheet_match.matched is False

    def test_missing_list(self) -> None:
        with pytest.raises(UpstreamFormatError, match="demolitionItems"):
            build_items({"items": []}, [])

    def test_item_cap(self) -> None:
        payload = {"demolitionItems": [{"name": f"Item {n}"} for n in range(600)]}
        assert len(build_items(payload, [])) == 500


class TestBuildRawMeasurements:
    def test_entries(self) -> None:
        entries = build_raw_measurements({
            "rawMeasurements": [
                {"item": "Drywall partition", "measurementText": "75 LF"},
                {"item": "Carpet"},
                "junk",
            ]
        })
        assert entries == [RawMeasurement(item="Drywall partition", measurement_text="75 LF")]

    def test_reported_failure(self) -> None:
        with pytest.raises(UpstreamFormatError, match="reported failure"):
            build_raw_measurements({"success": False, "error": "unreadable"})

    def test_missing_list(self) -> None:
        with pytest.raises(UpstreamFormatError, match="rawMeasurements"):
            build_raw_measurements({"success": True})
