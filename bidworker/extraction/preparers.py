"""Strategies for packaging a document for model calls, chosen by mime type."""

import mimetypes
from abc import ABC, abstractmethod
from dataclasses import dataclass

from bidworker.extraction.exceptions import ExtractionError
from bidworker.extraction.models import InlineContent, RawDocument
from bidworker.pdf.base import BasePdfExtractor
from bidworker.pdf.exceptions import PdfExtractionError

PDF_MIME_TYPE = "application/pdf"
IMAGE_MIME_TYPES = frozenset({
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/gif",
})


@dataclass(frozen=True)
class PreparedDocument:
    """Document content ready to be attached to any phase prompt."""

    text: str | None = None
    inline_content: InlineContent | None = None

    def build_prompt(self, prompt: str) -> str:
        if self.text is None:
            return prompt
        return f"{prompt}\n\nDOCUMENT CONTENT:\n{self.text}"


class Preparer(ABC):
    """Turns a RawDocument into a PreparedDocument."""

    @abstractmethod
    def supports(self, mime_type: str) -> bool:
        """Return True if this preparer handles the given mime type."""

    @abstractmethod
    def prepare(self, document: RawDocument) -> PreparedDocument:
        """Package the document for model calls.

        Raises:
            ExtractionError: if the document cannot be packaged.
        """


class PdfInlinePreparer(Preparer):
    """Sends PDF bytes to the model as an attached file."""

    def supports(self, mime_type: str) -> bool:
        return mime_type == PDF_MIME_TYPE

    def prepare(self, document: RawDocument) -> PreparedDocument:
        return PreparedDocument(
            inline_content=InlineContent(data=document.data, mime_type=PDF_MIME_TYPE)
        )


class PdfTextPreparer(Preparer):
    """Extracts PDF text locally and sends it as prompt text."""

    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def supports(self, mime_type: str) -> bool:
        return mime_type == PDF_MIME_TYPE

    def prepare(self, document: RawDocument) -> PreparedDocument:
        try:
            text = self._pdf_extractor.extract(document.data)
        except PdfExtractionError as exc:
            raise ExtractionError(f"Could not read PDF '{document.filename}': {exc}") from exc
        if not text:
            raise ExtractionError(f"PDF '{document.filename}' contains no extractable text")
        return PreparedDocument(text=text)


class ImagePreparer(Preparer):
    def supports(self, mime_type: str) -> bool:
        return mime_type in IMAGE_MIME_TYPES

    def prepare(self, document: RawDocument) -> PreparedDocument:
        mime_type = "image/jpeg" if document.mime_type == "image/jpg" else document.mime_type
        return PreparedDocument(
            inline_content=InlineContent(data=document.data, mime_type=mime_type)
        )


class TextPreparer(Preparer):
    def supports(self, mime_type: str) -> bool:
        return mime_type.startswith("text/")

    def prepare(self, document: RawDocument) -> PreparedDocument:
        text = document.data.decode("utf-8", errors="replace").strip()
        if not text:
            raise ExtractionError(f"Text document '{document.filename}' is empty")
        return PreparedDocument(text=text)


def select_preparer(document: RawDocument, preparers: list[Preparer]) -> Preparer:
    """Pick the first preparer supporting the document's mime type.

    Generic mime types fall back to a guess from the filename.

    Raises:
        ExtractionError: if no preparer supports the document.
    """
    mime_type = _effective_mime_type(document)
    for preparer in preparers:
        if preparer.supports(mime_type):
            return preparer
    raise ExtractionError(f"Unsupported document type '{mime_type}' for '{document.filename}'")


def _effective_mime_type(document: RawDocument) -> str:
    mime_type = (document.mime_type or "").split(";", 1)[0].strip().lower()
    if mime_type and mime_type != "application/octet-stream":
        return mime_type
    guessed, _ = mimetypes.guess_type(document.filename)
    return guessed or mime_type
