from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for PDF-to-text adapters used when bids are sent as text."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract bid text from PDF bytes, one ``[Page N]`` block per page.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            Extracted text; empty string when no page has text.

        Raises:
            PdfExtractionError: if the PDF cannot be opened or read.
        """


def join_pages(pages: list[str]) -> str:
    """Join page texts into one string with page markers, skipping empty pages."""
    blocks = [
        f"[Page {number}]\n{text.strip()}"
        for number, text in enumerate(pages, start=1)
        if text and text.strip()
    ]
    return "\n\n".join(blocks)
