from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class JobRecord:
    """Represents a row from the bid_extraction_jobs table."""

    id: int
    bid_id: int
    status: str
    attempts: int
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class BidRecord:
    """Represents a row from the bids table (columns used by the worker)."""

    id: int
    owner_id: int
    document_uuid: str
    document_filename: str
    document_mime_type: str
    storage_disk: str = "local"
    extracted_data: dict[str, Any] = field(default_factory=dict)
    demolition_items: list[dict[str, Any]] = field(default_factory=list)
    pricing_summary: dict[str, Any] | None = None
    revision: int = 0

