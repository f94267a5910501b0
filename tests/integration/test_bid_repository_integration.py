import asyncio

import pytest

from bidworker.database.repositories.bid_repository import BidRepository
from bidworker.database.repositories.price_catalog_repository import PriceCatalogRepository
from bidworker.processor.exceptions import BidNotFoundError


@pytest.mark.integration
class TestBidRepository:
    def test_find_by_id(self, seed_bid: tuple[int, str], owner_id: int) -> None:
        bid_id, bid_uuid = seed_bid
        bid = BidRepository().find_by_id(bid_id)
        assert bid.owner_id == owner_id
        assert bid.document_uuid == bid_uuid
        assert bid.demolition_items == []

    def test_find_by_id_and_other_owner(self, seed_bid: tuple[int, str], owner_id: int) -> None:
        with pytest.raises(BidNotFoundError):
            BidRepository().find_by_id_and_owner(seed_bid[0], owner_id + 1_000_000)

    def test_save_extraction_merges_and_bumps_revision(self, seed_bid: tuple[int, str]) -> None:
        bid_id = seed_bid[0]
        repo = BidRepository()
        first = repo.save_extraction(
            bid_id,
            extracted_data={"method": "multi-phase", "exclusions": ["Asbestos"]},
            items=[{"name": "Drywall partition"}],
            pricing_summary={"totalCalculatedCost": 187.5},
        )
        second = repo.save_extraction(
            bid_id,
            extracted_data={"method": "multi-phase-partial"},
            items=[{"name": "Carpet flooring"}],
            pricing_summary={"totalCalculatedCost": 0},
        )
        assert second == first + 1

        bid = repo.find_by_id(bid_id)
        assert bid.extracted_data["method"] == "multi-phase-partial"
        assert bid.extracted_data["exclusions"] == ["Asbestos"]
        assert [item["name"] for item in bid.demolition_items] == ["Carpet flooring"]
        assert bid.demolition_items[0]["id"]
        assert bid.pricing_summary == {"totalCalculatedCost": 0}

    def test_update_items_missing_bid(self, integration_pool: None) -> None:
        with pytest.raises(BidNotFoundError):
            BidRepository().update_items(99999999, [], {})


@pytest.mark.integration
class TestPriceCatalogRepository:
    def test_fetch_owner_catalog(self, seed_catalog_item: int, owner_id: int) -> None:
        entries = asyncio.run(PriceCatalogRepository().fetch(owner_id))
        entry = next(e for e in entries if e.id == str(seed_catalog_item))
        assert entry.name == "Drywall removal"
        assert entry.price == 2.5
        assert entry.category == "wall"
