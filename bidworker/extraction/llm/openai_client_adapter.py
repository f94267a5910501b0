import base64
from typing import Any

import httpx
import openai

from bidworker.extraction.exceptions import ExtractionError, ExtractionNetworkError
from bidworker.extraction.llm.client_base import BaseLLMClient
from bidworker.extraction.models import InlineContent


class OpenAIClientAdapter(BaseLLMClient):
    """Extraction AI client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
        json_mode: bool = True,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )
        self._json_mode = json_mode

    async def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        inline_content: InlineContent | None = None,
    ) -> str:
        request: dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": _user_content(user_prompt, inline_content)},
            ],
        }
        if self._json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**request)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionNetworkError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise ExtractionNetworkError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise ExtractionError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ExtractionError("AI returned empty response")
        return content


def _user_content(
    user_prompt: str,
    inline_content: InlineContent | None,
) -> str | list[dict[str, Any]]:
    if inline_content is None:
        return user_prompt
    encoded = base64.b64encode(inline_content.data).decode("ascii")
    data_url = f"data:{inline_content.mime_type};base64,{encoded}"
    if inline_content.mime_type.startswith("image/"):
        attachment: dict[str, Any] = {"type": "image_url", "image_url": {"url": data_url}}
    else:
        attachment = {
            "type": "file",
            "file": {"filename": "document.pdf", "file_data": data_url},
        }
    return [{"type": "text", "text": user_prompt}, attachment]
