import asyncio
from pathlib import Path

from bidworker.config.settings import Settings
from bidworker.database.repositories.bid_repository import BidRepository
from bidworker.database.repositories.price_catalog_repository import PriceCatalogRepository
from bidworker.extraction.codec import item_to_record, result_to_record, summary_to_record
from bidworker.extraction.factory import ExtractorFactory
from bidworker.extraction.models import BidExtractionResult
from bidworker.extraction.orchestrator import ExtractionOrchestrator
from bidworker.logging.logger import Log
from bidworker.processor.file_loader import FileLoader


class Processor:
    """Extracts one bid's document and stores the result on the bid.

    Pipeline: load bid -> load file -> extract -> persist.
    An unsuccessful extraction is still persisted; only infrastructure
    errors (missing bid or file, database failures) propagate.
    """

    def __init__(
        self,
        file_loader: FileLoader,
        bid_repo: BidRepository,
        orchestrator: ExtractionOrchestrator,
    ) -> None:
        self._file_loader = file_loader
        self._bid_repo = bid_repo
        self._orchestrator = orchestrator

    def process(self, bid_id: int, job_id: int) -> BidExtractionResult:
        Log.info(f"Processing bid {bid_id} for job {job_id}")

        bid = self._bid_repo.find_by_id(bid_id)
        document = self._file_loader.load(bid)
        Log.info(f"Loaded {len(document.data)} bytes for bid {bid_id}")

        result = asyncio.run(self._orchestrator.extract(document, bid.owner_id))
        if not result.success:
            Log.warning(f"Extraction for bid {bid_id} incomplete: {result.extraction_notes}")

        revision = self._bid_repo.save_extraction(
            bid_id,
            extracted_data=result_to_record(result, include_items=False),
            items=[item_to_record(item) for item in result.demolition_items],
            pricing_summary=summary_to_record(result.pricing_summary),
        )
        Log.info(
            f"Stored {result.total_items} items for bid {bid_id} (revision {revision})"
        )
        return result


def build_processor(settings: Settings, files_root: Path | None = None) -> Processor:
    """Build a Processor with all required adapters."""
    extractor = ExtractorFactory.create(settings)
    orchestrator = ExtractionOrchestrator(
        extractor=extractor,
        catalog=PriceCatalogRepository(),
    )
    return Processor(
        file_loader=FileLoader(files_root if files_root is not None else Path(settings.files_root)),
        bid_repo=BidRepository(),
        orchestrator=orchestrator,
    )
