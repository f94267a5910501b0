"""Sequences the extraction phases for one document."""

from pathlib import Path

from bidworker.extraction.catalog_base import BasePriceCatalog
from bidworker.extraction.extractor import Extractor
from bidworker.extraction.models import (
    BidExtractionResult,
    DemolitionItem,
    DocumentMetadata,
    PriceCatalogEntry,
    ProcessingPhases,
    RawDocument,
)
from bidworker.extraction.phases.items import Phase2ItemIdentifier
from bidworker.extraction.phases.measurements import Phase2MeasurementExtractor, price_items
from bidworker.extraction.phases.metadata import Phase1MetadataExtractor
from bidworker.extraction.pricing import aggregate_pricing
from bidworker.logging.logger import Log

METHOD_MULTI_PHASE = "multi-phase"
METHOD_FALLBACK = "multi-phase-fallback-measurements"
METHOD_PARTIAL = "multi-phase-partial"
METHOD_FAILED = "failed"


class ExtractionOrchestrator:
    """Runs Phase 1, Phase 2A and Phase 2B in order and builds the result.

    Phases run strictly one after another because each prompt carries the
    previous phase's output. extract() never raises: every failure ends up
    in a result with success=False and an explanation in extraction_notes.
    """

    def __init__(
        self,
        *,
        extractor: Extractor,
        catalog: BasePriceCatalog,
        prompt_dir: Path | None = None,
    ) -> None:
        self._extractor = extractor
        self._catalog = catalog
        self._metadata_phase = Phase1MetadataExtractor(extractor, prompt_dir)
        self._items_phase = Phase2ItemIdentifier(extractor, prompt_dir)
        self._measurements_phase = Phase2MeasurementExtractor(extractor, prompt_dir)

    async def extract(
        self,
        document: RawDocument,
        owner_id: int | None = None,
    ) -> BidExtractionResult:
        """Extract priced demolition items from one document."""
        try:
            return await self._extract(document, owner_id)
        except Exception as exc:
            Log.exception(f"Extraction of '{document.filename}' failed unexpectedly: {exc}")
            return BidExtractionResult(
                success=False,
                method=METHOD_FAILED,
                extraction_notes=f"Extraction failed: {exc}",
            )

    async def _extract(
        self,
        document: RawDocument,
        owner_id: int | None,
    ) -> BidExtractionResult:
        Log.info(f"Starting extraction of '{document.filename}' ({document.mime_type})")
        prepared = self._extractor.prepare(document)
        notes: list[str] = []

        phase1 = await self._metadata_phase.run(prepared)
        metadata = phase1.payload if phase1.success else DocumentMetadata()
        if not phase1.success:
            notes.append(f"Metadata extraction failed: {phase1.error}")

        catalog = await self._load_catalog(owner_id)

        phase2a = await self._items_phase.run(prepared, metadata, catalog)
        if not phase2a.success:
            notes.append(f"Item identification failed: {phase2a.error}")
            return self._result(
                success=False,
                method=METHOD_PARTIAL,
                metadata=metadata,
                items=[],
                phases=ProcessingPhases(phase1_success=phase1.success),
                notes=notes,
            )

        items: list[DemolitionItem] = phase2a.payload
        if not items:
            notes.append("No demolition items were identified in the document")
            return self._result(
                success=True,
                method=METHOD_MULTI_PHASE,
                metadata=metadata,
                items=[],
                phases=ProcessingPhases(phase1.success, True, True),
                notes=notes,
            )

        phase2b = await self._measurements_phase.run(prepared, items, catalog)
        if phase2b.success:
            method = METHOD_MULTI_PHASE
        else:
            notes.append(f"{phase2b.error}; switched to single-step measurement extraction")
            Log.warning("Primary measurement path failed, using fallback")
            phase2b = await self._measurements_phase.run_fallback(prepared, items, catalog)
            method = METHOD_FALLBACK

        if phase2b.success:
            return self._result(
                success=True,
                method=method,
                metadata=metadata,
                items=phase2b.payload,
                phases=ProcessingPhases(phase1.success, True, True),
                notes=notes,
            )

        notes.append(f"{phase2b.error}; items returned without measurements")
        return self._result(
            success=False,
            method=METHOD_PARTIAL,
            metadata=metadata,
            items=price_items(items, catalog),
            phases=ProcessingPhases(phase1.success, True, False),
            notes=notes,
        )

    async def _load_catalog(self, owner_id: int | None) -> list[PriceCatalogEntry]:
        if owner_id is None:
            return []
        try:
            catalog = await self._catalog.fetch(owner_id)
        except Exception as exc:
            Log.warning(f"Price catalog for owner {owner_id} unavailable: {exc}")
            return []
        Log.info(f"Loaded {len(catalog)} price catalog entries for owner {owner_id}")
        return catalog

    @staticmethod
    def _result(
        *,
        success: bool,
        method: str,
        metadata: DocumentMetadata,
        items: list[DemolitionItem],
        phases: ProcessingPhases,
        notes: list[str],
    ) -> BidExtractionResult:
        summary = aggregate_pricing(items)
        Log.info(
            f"Extraction finished ({method}): {len(items)} items, "
            f"total {summary.total_calculated_cost:.2f}"
        )
        return BidExtractionResult(
            success=success,
            method=method,
            metadata=metadata,
            demolition_items=items,
            pricing_summary=summary,
            processing_phases=phases,
            extraction_notes="; ".join(notes) if notes else "Extraction completed successfully",
        )
