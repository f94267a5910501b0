import asyncio

from psycopg.rows import dict_row

from bidworker.database.connection import get_connection
from bidworker.extraction.catalog_base import BasePriceCatalog
from bidworker.extraction.models import PriceCatalogEntry


class PriceCatalogRepository(BasePriceCatalog):
    """Reads a user's price catalog from the price_catalog_items table."""

    def list_for_owner(self, owner_id: int) -> list[PriceCatalogEntry]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, name, price, category
                    FROM price_catalog_items
                    WHERE owner_id = %s
                    ORDER BY category, name
                    """,
                    (owner_id,),
                )
                rows = cur.fetchall()

        return [
            PriceCatalogEntry(
                id=str(row["id"]),
                name=row["name"],
                price=float(row["price"]),
                category=row["category"] or "",
            )
            for row in rows
        ]

    async def fetch(self, owner_id: int) -> list[PriceCatalogEntry]:
        return await asyncio.to_thread(self.list_for_owner, owner_id)
