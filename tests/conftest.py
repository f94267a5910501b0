import io
from collections.abc import Callable
from typing import Any

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from bidworker.extraction.extractor import Extractor
from bidworker.extraction.llm.client_base import BaseLLMClient
from bidworker.extraction.models import InlineContent
from bidworker.extraction.preparers import ImagePreparer, PdfInlinePreparer, TextPreparer


class ScriptedClient(BaseLLMClient):
    """LLM client that replays canned replies and records every call."""

    def __init__(self, replies: list[str | Exception]) -> None:
        self._replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        inline_content: InlineContent | None = None,
    ) -> str:
        self.calls.append({
            "model": model,
            "temperature": temperature,
            "user_prompt": user_prompt,
            "inline_content": inline_content,
        })
        if not self._replies:
            raise AssertionError("Unexpected model call")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture()
def make_extractor() -> Callable[..., tuple[Extractor, ScriptedClient]]:
    """Build an Extractor backed by a ScriptedClient with the given replies."""

    def _make(
        replies: list[str | Exception],
        temperature: float = 0.0,
    ) -> tuple[Extractor, ScriptedClient]:
        client = ScriptedClient(replies)
        extractor = Extractor(
            client=client,
            model="test-model",
            preparers=[PdfInlinePreparer(), ImagePreparer(), TextPreparer()],
            temperature=temperature,
        )
        return extractor, client

    return _make


def _pdf(*pages: list[str]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            c.drawString(72, y, line)
            y -= 20
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Single-page bid with two measured line items."""
    return _pdf([
        "ACME Demolition - Proposal",
        "1. Remove drywall partitions 75 LF",
        "2. Remove carpet flooring 1,200 SF",
    ])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    return _pdf(["Scope of work"], ["Exclusions: asbestos abatement"])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Valid PDF with a blank page and no text."""
    return _pdf([])
