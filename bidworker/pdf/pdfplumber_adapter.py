import io
from typing import Any

import pdfplumber

from bidworker.pdf.base import BasePdfExtractor, join_pages
from bidworker.pdf.exceptions import PdfExtractionError


class PdfPlumberAdapter(BasePdfExtractor):
    """Extracts page text plus table rows using pdfplumber.

    Bid line items are often laid out as tables; their rows are appended
    below the page text as ``cell | cell | cell`` lines so quantities stay
    next to the item they belong to.
    """

    def extract(self, pdf_bytes: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [self._page_text(page) for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc
        return join_pages(pages)

    @staticmethod
    def _page_text(page: Any) -> str:
        text = page.extract_text() or ""
        rows = [
            " | ".join(cell.strip() for cell in row if cell and cell.strip())
            for table in page.extract_tables()
            for row in table
        ]
        table_lines = [row for row in rows if row]
        if not table_lines:
            return text
        return text + "\n" + "\n".join(table_lines)
