import json
from pathlib import Path

from bidworker.extraction.catalog_matching import enhance_catalog_matches, format_catalog_for_prompt
from bidworker.extraction.codec import metadata_to_record
from bidworker.extraction.exceptions import ExtractionError
from bidworker.extraction.extractor import Extractor
from bidworker.extraction.models import DocumentMetadata, PhaseResult, PriceCatalogEntry
from bidworker.extraction.preparers import PreparedDocument
from bidworker.extraction.prompt_loader import load_prompt_template
from bidworker.extraction.validator import build_items
from bidworker.logging.logger import Log


class Phase2ItemIdentifier:
    """Phase 2A: item names, categories and actions with catalog matches."""

    def __init__(self, extractor: Extractor, prompt_dir: Path | None = None) -> None:
        self._extractor = extractor
        self._template = load_prompt_template("phase2_items", prompt_dir)

    async def run(
        self,
        document: PreparedDocument,
        metadata: DocumentMetadata,
        catalog: list[PriceCatalogEntry],
    ) -> PhaseResult:
        """Payload on success is the list of identified DemolitionItems."""
        prompt = self._template.format(
            phase1_context=json.dumps(metadata_to_record(metadata), indent=2),
            basic_item_count=metadata.basic_item_count or "an unknown number of",
            catalog=format_catalog_for_prompt(catalog),
        )
        try:
            data = await self._extractor.call_and_parse(prompt, document)
            items = build_items(data, catalog)
        except ExtractionError as exc:
            Log.warning(f"Phase 2A failed: {exc}")
            return PhaseResult(success=False, error=str(exc))

        model_matches = sum(1 for item in items if item.pricesheet_match.matched)
        items = enhance_catalog_matches(items, catalog)
        total_matches = sum(1 for item in items if item.pricesheet_match.matched)
        if metadata.basic_item_count and metadata.basic_item_count != len(items):
            Log.warning(
                f"Phase 2A found {len(items)} items, "
                f"Phase 1 expected about {metadata.basic_item_count}"
            )
        Log.info(
            f"Phase 2A complete: {len(items)} items, {model_matches} catalog matches "
            f"from the model, {total_matches - model_matches} added locally"
        )
        return PhaseResult(success=True, payload=items)
