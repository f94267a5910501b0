from pathlib import Path

from bidworker.extraction.exceptions import ExtractionError
from bidworker.extraction.extractor import Extractor
from bidworker.extraction.models import PhaseResult
from bidworker.extraction.preparers import PreparedDocument
from bidworker.extraction.prompt_loader import load_prompt_template
from bidworker.extraction.validator import build_metadata
from bidworker.logging.logger import Log


class Phase1MetadataExtractor:
    """Phase 1: contractor, client and project metadata plus scope of work."""

    def __init__(self, extractor: Extractor, prompt_dir: Path | None = None) -> None:
        self._extractor = extractor
        self._template = load_prompt_template("phase1_metadata", prompt_dir)

    async def run(self, document: PreparedDocument) -> PhaseResult:
        """Payload on success is a DocumentMetadata."""
        try:
            data = await self._extractor.call_and_parse(self._template.format(), document)
        except ExtractionError as exc:
            Log.warning(f"Phase 1 failed: {exc}")
            return PhaseResult(success=False, error=str(exc))
        metadata = build_metadata(data)
        Log.info(
            f"Phase 1 complete: ~{metadata.basic_item_count} items, "
            f"{len(metadata.scope_of_work.items_to_remove)} scope entries to remove"
        )
        return PhaseResult(success=True, payload=metadata)
