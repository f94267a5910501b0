from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RawDocument:
    """Uploaded document bytes as supplied by the document source."""

    data: bytes
    filename: str
    mime_type: str


@dataclass(frozen=True)
class InlineContent:
    """Binary payload attached to a model call next to the prompt."""

    data: bytes
    mime_type: str


@dataclass(frozen=True)
class PhaseResult:
    """Outcome of one extraction phase."""

    success: bool
    payload: Any = None
    error: str | None = None


@dataclass(frozen=True)
class Measurement:
    """Quantity of work for one item.

    Only the field matching ``unit`` is populated (SF -> square_feet,
    LF -> linear_feet, EA -> count, CY/SY -> quantity).
    """

    quantity: float | None = None
    unit: str | None = None
    square_feet: float | None = None
    linear_feet: float | None = None
    count: float | None = None
    dimensions: str | None = None


@dataclass(frozen=True)
class PriceCatalogEntry:
    """One named unit price from a user's price catalog."""

    name: str
    price: float
    category: str = ""
    id: str | None = None


@dataclass(frozen=True)
class PricesheetMatch:
    """Link between an item and a catalog entry."""

    matched: bool = False
    item_name: str | None = None
    item_price: float | None = None
    item_id: str | None = None


@dataclass(frozen=True)
class PriceCalculation:
    """Resolved price of a single item and where it came from."""

    quantity: float = 0.0
    unit_price: float = 0.0
    total_price: float = 0.0
    calculation_method: str = "manual"
    has_valid_price: bool = False
    measurement_type: str = "unknown"
    last_calculated: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class DemolitionItem:
    """A single line of demolition work."""

    name: str
    item_number: str | None = None
    description: str = ""
    category: str = "other"
    action: str = "remove"
    location: str | None = None
    notes: str | None = None
    measurements: Measurement = field(default_factory=Measurement)
    pricing: str | None = None
    unit_price: float | None = None
    total_price: float | None = None
    pricesheet_match: PricesheetMatch = field(default_factory=PricesheetMatch)
    calculated_unit_price: float = 0.0
    calculated_total_price: float = 0.0
    proposed_bid: float | None = None
    price_calculation: PriceCalculation | None = None
    is_active: bool = True
    id: str | None = None


@dataclass(frozen=True)
class PricingSummary:
    """Bid-level roll-up of item prices."""

    total_calculated_cost: float = 0.0
    items_with_prices: int = 0
    items_with_pricesheet_match: int = 0
    items_without_prices: int = 0
    items_with_errors: int = 0


@dataclass(frozen=True)
class ContractorInfo:
    company_name: str | None = None
    contact_person: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    license: str | None = None


@dataclass(frozen=True)
class ClientInfo:
    company_name: str | None = None
    contact_person: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class ProjectDetails:
    project_name: str | None = None
    project_type: str | None = None
    document_type: str | None = None
    location: str | None = None
    bid_date: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class ScopeOfWork:
    items_to_remove: list[str] = field(default_factory=list)
    items_to_remain: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PriceInfo:
    total_amount: float | None = None
    includes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentMetadata:
    """Everything Phase 1 learns about the document besides its items."""

    contractor_info: ContractorInfo = field(default_factory=ContractorInfo)
    client_info: ClientInfo = field(default_factory=ClientInfo)
    project_details: ProjectDetails = field(default_factory=ProjectDetails)
    scope_of_work: ScopeOfWork = field(default_factory=ScopeOfWork)
    basic_item_count: int = 0
    section_headers: list[str] = field(default_factory=list)
    special_notes: list[str] = field(default_factory=list)
    price_info: PriceInfo = field(default_factory=PriceInfo)
    exclusions: list[str] = field(default_factory=list)
    additional_conditions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RawMeasurement:
    """A document line naming an item plus its literal measurement text."""

    item: str
    measurement_text: str


@dataclass(frozen=True)
class NormalizedMeasurement:
    item: str
    measurement: Measurement


@dataclass(frozen=True)
class ProcessingPhases:
    phase1_success: bool = False
    phase2a_success: bool = False
    phase2b_success: bool = False


@dataclass(frozen=True)
class BidExtractionResult:
    """Output of one extraction run over a document."""

    success: bool
    method: str
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    demolition_items: list[DemolitionItem] = field(default_factory=list)
    pricing_summary: PricingSummary = field(default_factory=PricingSummary)
    processing_phases: ProcessingPhases = field(default_factory=ProcessingPhases)
    extraction_notes: str = ""

    @property
    def total_items(self) -> int:
        return len(self.demolition_items)
