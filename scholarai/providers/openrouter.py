"""OpenRouter (OpenAI-compatible chat completions) adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import openai
from openai import OpenAI

from scholarai.config import config
from scholarai.errors import ProviderGenericError, provider_error_for
from scholarai.models import MessageRole
from scholarai.tiers import THINKING_BUDGET

from .base import BaseProvider

if TYPE_CHECKING:
    from scholarai.models import GenerationRequest

logger = config.get_logger(__name__)

TOP_P = 0.9


class OpenRouterProvider(BaseProvider):
    """Calls ``chat.completions.create`` against OpenRouter."""

    kind = "openrouter"

    def __init__(self, api_key: str, base_url: str | None = None) -> None:
        """Initialize the adapter with an explicit credential.

        Args:
            api_key: OpenRouter API key.
            base_url: API base URL. If None, uses config.OPENROUTER_BASE_URL.
        """
        default_headers = config.get_openrouter_headers()
        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url or config.OPENROUTER_BASE_URL,
            default_headers=default_headers or None,
            max_retries=0,
            timeout=config.REQUEST_TIMEOUT,
        )

    @staticmethod
    def build_messages(request: GenerationRequest) -> list[dict[str, Any]]:
        """Build the chat-completions message list.

        Returns:
            list[dict[str, Any]]: System message first, then the conversation.
        """
        messages: list[dict[str, Any]] = []
        if request.system_instruction:
            messages.append({"role": "system", "content": request.system_instruction})

        turns = request.turns()
        for index, (role, text) in enumerate(turns):
            wire_role = "assistant" if role == MessageRole.MODEL else "user"
            content: str | list[dict[str, Any]] = text
            if request.image is not None and index == len(turns) - 1:
                content = [
                    {"type": "text", "text": text},
                    {"type": "image_url", "image_url": {"url": request.image.data_url()}},
                ]
            messages.append({"role": wire_role, "content": content})
        return messages

    def generate(
        self,
        request: GenerationRequest,
        model: str,
        options: dict[str, Any] | None = None,
    ) -> str:
        """Run one chat completion.

        Returns:
            str: The response text.

        Raises:
            ProviderError: On any API error status or network failure.
        """
        options = options or {}
        params: dict[str, Any] = {
            "model": model,
            "messages": self.build_messages(request),
            "temperature": request.temperature,
            "top_p": TOP_P,
        }
        if request.json_mode:
            params["response_format"] = {"type": "json_object"}
        if THINKING_BUDGET in options:
            params["extra_body"] = {"reasoning": {"max_tokens": options[THINKING_BUDGET]}}

        logger.info("[OpenRouter] Sending %s request to %s", request.operation, model)
        try:
            response = self.client.chat.completions.create(**params)
        except openai.APIStatusError as e:
            logger.warning(
                "[OpenRouter] %s returned status %s: %s", model, e.status_code, e.message
            )
            raise provider_error_for(e.status_code, e.body, e.message) from e
        except openai.APIConnectionError as e:
            logger.warning("[OpenRouter] Network failure calling %s: %s", model, e)
            raise ProviderGenericError(0, None, str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        return self._require_text(content, model)
