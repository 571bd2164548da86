# asuna/services/llm_connector.py
# Reasoning engine backed by the OpenAI chat-completions API.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import Any, Dict, List, Optional

from openai import APIError, AsyncOpenAI

from asuna.core.config import Settings
from asuna.models.common import Message
from asuna.utils.logger import console


class ReasoningEngineError(Exception):
    """The reasoning engine failed or answered with something unusable."""


class ReasoningEngineUnavailable(ReasoningEngineError):
    """No credential is configured for the reasoning engine."""


class OpenAIReasoningEngine:
    """
    Sends the conversation and the tool catalog to a chat model and returns
    the assistant message: either final text or a list of tool calls.
    """

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self._model = settings.OPENAI_MODEL
        self._temperature = settings.OPENAI_TEMPERATURE
        self._client = client
        if self._client is None and settings.OPENAI_API_KEY:
            self._client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)

    @property
    def available(self) -> bool:
        return self._client is not None

    async def complete(self, messages: List[Dict[str, Any]], tools: Optional[List[Dict[str, Any]]] = None) -> Message:
        """
        Performs one model round trip.

        Raises:
            ReasoningEngineUnavailable: If no client is configured.
            ReasoningEngineError: On API errors or a malformed response.
        """
        if self._client is None:
            raise ReasoningEngineUnavailable("OpenAI client is not configured.")

        request_params: Dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature,
        }
        if tools:
            request_params["tools"] = tools
            request_params["tool_choice"] = "auto"

        try:
            response = await self._client.chat.completions.create(**request_params)
        except APIError as e:
            message = str(e.body) if e.body is not None else 'Unknown API Error'
            if isinstance(e.body, dict):
                message = e.body.get('message', 'Unknown API Error')
            console.error(f"An API error occurred: {message}")
            raise ReasoningEngineError(message) from e

        if not response.choices:
            raise ReasoningEngineError("The model returned no choices.")
        try:
            return Message.model_validate(response.choices[0].message.model_dump())
        except ValueError as e:
            raise ReasoningEngineError(f"Malformed model response: {e}") from e

    async def aclose(self):
        if self._client is not None:
            await self._client.close()
