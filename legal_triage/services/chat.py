"""Chat service streaming completions from an OpenAI-compatible API.

The triage system prompt is always the first message of the conversation
sent to the model.
"""

import json
import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

import httpx

from legal_triage.core.exceptions import ChatCompletionError

logger = logging.getLogger(__name__)

STREAM_ERROR_MARKER = "\n[Stream error]\n"


@dataclass
class LLMConfig:
    """Configuration for the chat completions API."""
    model_id: str = "gpt-4o-mini"
    api_base_url: str = "https://api.openai.com/v1"
    api_key: str | None = None
    max_tokens: int = 1000
    temperature: float = 0.7


def build_messages(
    system_prompt: str,
    history: list[dict[str, str]],
) -> list[dict[str, str]]:
    """Prepend the system prompt to the conversation history."""
    return [{"role": "system", "content": system_prompt}, *history]


def parse_stream_line(line: str) -> str | None:
    """Extract the content delta from one server-sent-event line.

    Returns:
        The delta text, or None for keep-alives, empty deltas and ``[DONE]``
    """
    if not line.startswith("data:"):
        return None

    data = line[len("data:"):].strip()
    if not data or data == "[DONE]":
        return None

    chunk = json.loads(data)
    choices = chunk.get("choices") or []
    if not choices:
        return None

    delta = choices[0].get("delta") or {}
    return delta.get("content") or None


class ChatService:
    """Service for streaming chat completions."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        llm_config: LLMConfig | None = None,
    ) -> None:
        self.client = client
        self.llm_config = llm_config or LLMConfig()

    def _build_payload(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        return {
            "model": self.llm_config.model_id,
            "messages": messages,
            "stream": True,
            "temperature": self.llm_config.temperature,
            "max_tokens": self.llm_config.max_tokens,
        }

    async def open_stream(self, messages: list[dict[str, str]]) -> httpx.Response:
        """Start a streaming completion.

        Failures surface here, before any content has been sent to the client.

        Raises:
            ChatCompletionError: If the request fails or returns an error status
        """
        headers = {"Accept": "text/event-stream"}
        if self.llm_config.api_key:
            headers["Authorization"] = f"Bearer {self.llm_config.api_key}"

        url = f"{self.llm_config.api_base_url.rstrip('/')}/chat/completions"
        request = self.client.build_request(
            "POST", url, json=self._build_payload(messages), headers=headers
        )

        logger.info(
            f"Creating chat completion: model={self.llm_config.model_id} "
            f"messages={len(messages)}"
        )

        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"Chat completion request failed: {e}")
            raise ChatCompletionError() from e

        if response.is_error:
            await response.aread()
            await response.aclose()
            logger.error(
                f"Chat completion returned {response.status_code}: {response.text[:500]}"
            )
            raise ChatCompletionError()

        return response

    async def iter_content(
        self,
        response: httpx.Response,
        message_count: int = 0,
    ) -> AsyncIterator[str]:
        """Yield content deltas from an open streaming response.

        A failure mid-stream ends the stream with an error marker.
        """
        start_time = time.monotonic()
        chunk_count = 0
        success = True

        try:
            async for line in response.aiter_lines():
                content = parse_stream_line(line)
                if content:
                    chunk_count += 1
                    yield content
        except (httpx.HTTPError, ValueError) as e:
            success = False
            logger.error(f"Chat stream error after {chunk_count} chunks: {e}")
            yield STREAM_ERROR_MARKER
        finally:
            await response.aclose()
            duration_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(
                f"Chat completion finished: model={self.llm_config.model_id} "
                f"messages={message_count} duration_ms={duration_ms} "
                f"chunks={chunk_count} success={success}"
            )

    async def stream_completion(
        self,
        messages: list[dict[str, str]],
    ) -> AsyncIterator[str]:
        """Open a completion and yield its content deltas."""
        response = await self.open_stream(messages)
        async for content in self.iter_content(response, len(messages)):
            yield content
