from abc import ABC, abstractmethod

from bidworker.extraction.models import InlineContent


class BaseLLMClient(ABC):
    """Contract for provider-specific extraction AI clients."""

    @abstractmethod
    async def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        inline_content: InlineContent | None = None,
    ) -> str:
        """Return provider response as plain text."""
