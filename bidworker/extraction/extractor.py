"""Shared call-and-parse routine used by every extraction phase."""

from typing import Any

from bidworker.extraction.exceptions import UpstreamFormatError
from bidworker.extraction.llm.client_base import BaseLLMClient
from bidworker.extraction.models import RawDocument
from bidworker.extraction.preparers import PreparedDocument, Preparer, select_preparer
from bidworker.extraction.response_parser import parse_model_response
from bidworker.logging.logger import Log

DEFAULT_SYSTEM_PROMPT = (
    "You extract structured data from demolition bid documents. "
    "Respond with a single JSON object and nothing else."
)


class Extractor:
    """Sends phase prompts to the AI provider and parses the replies."""

    def __init__(
        self,
        *,
        client: BaseLLMClient,
        model: str,
        preparers: list[Preparer],
        temperature: float = 0.0,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._client = client
        self._model = model
        self._preparers = preparers
        self._temperature = max(0.0, min(0.2, temperature))
        self._system_prompt = system_prompt

    def prepare(self, document: RawDocument) -> PreparedDocument:
        """Package the document once for all phases of a run.

        Raises:
            ExtractionError: if the document type is unsupported or unreadable.
        """
        preparer = select_preparer(document, self._preparers)
        Log.info(f"Preparing '{document.filename}' with {type(preparer).__name__}")
        return preparer.prepare(document)

    async def call_and_parse(
        self,
        prompt: str,
        document: PreparedDocument | None = None,
    ) -> dict[str, Any]:
        """Run one model call and return the JSON object it produced.

        Raises:
            UpstreamFormatError: if the reply cannot be repaired into an object.
            ExtractionNetworkError: if the provider call fails.
        """
        prepared = document or PreparedDocument()
        user_prompt = prepared.build_prompt(prompt)
        Log.debug(f"Extraction prompt:\n{user_prompt}")

        raw_response = await self._client.create_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=user_prompt,
            inline_content=prepared.inline_content,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        outcome = parse_model_response(raw_response)
        if not outcome.success or outcome.data is None:
            raise UpstreamFormatError(
                outcome.error or "Unparseable model response", snippet=outcome.snippet
            )
        return outcome.data
