"""Example extraction client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseLLMClient and register the provider in ExtractorFactory.
"""

import json
from typing import ClassVar

from bidworker.extraction.llm.client_base import BaseLLMClient
from bidworker.extraction.models import InlineContent


class ExampleClientAdapter(BaseLLMClient):
    """Example adapter that returns a fixed, valid and empty extraction JSON.

    No network calls. The same payload satisfies every extraction phase, so
    a full run completes with no items.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "success": True,
        "contractorInfo": {},
        "clientInfo": {},
        "projectDetails": {},
        "basicItemCount": 0,
        "sectionHeaders": [],
        "scopeOfWork": {"itemsToRemove": [], "itemsToRemain": []},
        "specialNotes": [],
        "priceInfo": {"totalAmount": None, "includes": []},
        "exclusions": [],
        "additionalConditions": [],
        "demolitionItems": [],
        "rawMeasurements": [],
    }

    async def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        inline_content: InlineContent | None = None,
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, inline_content
        return json.dumps(self.DEFAULT_RESPONSE)
