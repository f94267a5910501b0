import uuid
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from bidworker.database.connection import get_connection
from bidworker.database.models import BidRecord
from bidworker.processor.exceptions import BidNotFoundError

_BID_COLUMNS = """
    id, owner_id, document_uuid, document_filename, document_mime_type,
    storage_disk, extracted_data, demolition_items, pricing_summary, revision
"""


class BidRepository:
    """Database operations for the bids table.

    Every write increments ``revision``. The counter is advisory: writes are
    last-writer-wins and never check the revision they started from.
    """

    def find_by_id(self, bid_id: int) -> BidRecord:
        """Raises BidNotFoundError if no bid with this ID exists."""
        return self._find("WHERE id = %s", (bid_id,), f"Bid {bid_id} not found")

    def find_by_id_and_owner(self, bid_id: int, owner_id: int) -> BidRecord:
        """Raises BidNotFoundError if the bid does not exist or belongs to someone else."""
        return self._find(
            "WHERE id = %s AND owner_id = %s",
            (bid_id, owner_id),
            f"Bid {bid_id} not found for owner {owner_id}",
        )

    def save_extraction(
        self,
        bid_id: int,
        extracted_data: dict[str, Any],
        items: list[dict[str, Any]],
        pricing_summary: dict[str, Any],
    ) -> int:
        """Merge an extraction result into the bid and replace its item list.

        Returns:
            The bid's new revision.

        Raises:
            BidNotFoundError: if no bid with this ID exists.
        """
        return self._update(
            """
            UPDATE bids
            SET extracted_data = COALESCE(extracted_data, '{}'::jsonb) || %s,
                demolition_items = %s,
                pricing_summary = %s,
                revision = revision + 1,
                updated_at = NOW()
            WHERE id = %s
            RETURNING revision
            """,
            (Jsonb(extracted_data), Jsonb(with_item_ids(items)), Jsonb(pricing_summary), bid_id),
            bid_id,
        )

    def update_items(
        self,
        bid_id: int,
        items: list[dict[str, Any]],
        pricing_summary: dict[str, Any],
    ) -> int:
        """Replace the bid's item list and pricing summary after an edit.

        Returns:
            The bid's new revision.

        Raises:
            BidNotFoundError: if no bid with this ID exists.
        """
        return self._update(
            """
            UPDATE bids
            SET demolition_items = %s,
                pricing_summary = %s,
                revision = revision + 1,
                updated_at = NOW()
            WHERE id = %s
            RETURNING revision
            """,
            (Jsonb(with_item_ids(items)), Jsonb(pricing_summary), bid_id),
            bid_id,
        )

    def _find(self, where: str, params: tuple[Any, ...], missing: str) -> BidRecord:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(f"SELECT {_BID_COLUMNS} FROM bids {where}", params)
                row = cur.fetchone()

        if row is None:
            raise BidNotFoundError(missing)

        return BidRecord(
            id=row["id"],
            owner_id=row["owner_id"],
            document_uuid=str(row["document_uuid"]),
            document_filename=row["document_filename"],
            document_mime_type=row["document_mime_type"],
            storage_disk=row["storage_disk"],
            extracted_data=row["extracted_data"] or {},
            demolition_items=row["demolition_items"] or [],
            pricing_summary=row["pricing_summary"],
            revision=row["revision"],
        )

    @staticmethod
    def _update(query: str, params: tuple[Any, ...], bid_id: int) -> int:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                row = cur.fetchone()
                if row is None:
                    raise BidNotFoundError(f"Bid {bid_id} not found")
            conn.commit()
        return int(row[0])


def with_item_ids(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Give every item record without an ``id`` a new persistent one."""
    return [item if item.get("id") else {**item, "id": uuid.uuid4().hex} for item in items]
