from bidworker.extraction.extractor import Extractor
from bidworker.extraction.factory import ExtractorFactory
from bidworker.extraction.orchestrator import ExtractionOrchestrator

__all__ = ["ExtractionOrchestrator", "Extractor", "ExtractorFactory"]
