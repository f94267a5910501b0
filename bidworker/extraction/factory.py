from typing import ClassVar

from bidworker.config.settings import Settings
from bidworker.extraction.extractor import Extractor
from bidworker.extraction.llm.client_base import BaseLLMClient
from bidworker.extraction.llm.example_client_adapter import ExampleClientAdapter
from bidworker.extraction.llm.openai_client_adapter import OpenAIClientAdapter
from bidworker.extraction.preparers import (
    ImagePreparer,
    PdfInlinePreparer,
    PdfTextPreparer,
    Preparer,
    TextPreparer,
)
from bidworker.pdf.base import BasePdfExtractor
from bidworker.pdf.pdfplumber_adapter import PdfPlumberAdapter
from bidworker.pdf.pymupdf_adapter import PyMuPdfAdapter


class ExtractorFactory:
    """Creates the configured extractor."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
        "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
    }

    PDF_MODES: ClassVar[tuple[str, ...]] = ("inline", "text")

    PDF_ENGINES: ClassVar[dict[str, type[BasePdfExtractor]]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> Extractor:
        """Create a configured extractor from application settings."""
        provider = settings.llm_provider.lower()
        preparers = cls._build_preparers(settings)
        if provider == "example":
            return Extractor(
                client=ExampleClientAdapter(),
                model="example",
                preparers=preparers,
            )
        return Extractor(
            client=cls._build_client(provider, settings),
            model=settings.llm_model_name,
            preparers=preparers,
            temperature=settings.llm_temperature,
        )

    @classmethod
    def _build_client(cls, provider: str, settings: Settings) -> BaseLLMClient:
        return OpenAIClientAdapter(
            api_key=settings.llm_api_key,
            timeout_seconds=settings.llm_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
            json_mode=settings.llm_json_mode,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.llm_base_url or "").strip()
            if not url:
                raise ValueError(
                    "llm_base_url is required for llm_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return (settings.llm_base_url or "").strip() or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown LLM provider '{provider}'. Choose from: {supported}")

    @classmethod
    def _build_preparers(cls, settings: Settings) -> list[Preparer]:
        mode = settings.pdf_mode.lower()
        if mode not in cls.PDF_MODES:
            raise ValueError(f"Unknown PDF mode '{mode}'. Choose from: {list(cls.PDF_MODES)}")
        pdf_preparer: Preparer
        if mode == "text":
            pdf_preparer = PdfTextPreparer(cls._build_pdf_extractor(settings))
        else:
            pdf_preparer = PdfInlinePreparer()
        return [pdf_preparer, ImagePreparer(), TextPreparer()]

    @classmethod
    def _build_pdf_extractor(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.PDF_ENGINES.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ENGINES)}"
            )
        return adapter_cls()
