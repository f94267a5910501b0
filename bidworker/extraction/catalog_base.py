from abc import ABC, abstractmethod

from bidworker.extraction.models import PriceCatalogEntry


class BasePriceCatalog(ABC):
    """Read-only source of a user's price catalog."""

    @abstractmethod
    async def fetch(self, owner_id: int) -> list[PriceCatalogEntry]:
        """Return the owner's catalog entries, grouped by category."""
