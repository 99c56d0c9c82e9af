"""Google GenAI adapter."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from scholarai.config import config
from scholarai.errors import ProviderGenericError, provider_error_for
from scholarai.tiers import THINKING_BUDGET

from .base import BaseProvider

if TYPE_CHECKING:
    from scholarai.models import GenerationRequest

logger = config.get_logger(__name__)


class GoogleProvider(BaseProvider):
    """Calls ``models.generate_content`` on the Google GenAI API."""

    kind = "google"

    def __init__(self, api_key: str) -> None:
        """Initialize the adapter with an explicit credential.

        Args:
            api_key: Google AI Studio API key.
        """
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(config.REQUEST_TIMEOUT * 1000)),
        )

    def build_contents(self, request: GenerationRequest) -> list[types.Content]:
        """Convert the request turns to Content objects; the image rides on the last turn.

        Returns:
            list[types.Content]: Ordered conversation for generate_content.
        """
        turns = request.turns()
        contents: list[types.Content] = []
        for index, (role, text) in enumerate(turns):
            parts = [types.Part.from_text(text=text)]
            if request.image is not None and index == len(turns) - 1:
                parts.append(
                    types.Part.from_bytes(
                        data=base64.b64decode(request.image.data),
                        mime_type=request.image.mime_type,
                    )
                )
            contents.append(types.Content(role=role.value, parts=parts))
        return contents

    def build_config(
        self, request: GenerationRequest, options: dict[str, Any]
    ) -> types.GenerateContentConfig:
        settings: dict[str, Any] = {"temperature": request.temperature}
        if request.system_instruction:
            settings["system_instruction"] = request.system_instruction
        if request.json_mode:
            settings["response_mime_type"] = "application/json"
        if THINKING_BUDGET in options:
            settings["thinking_config"] = types.ThinkingConfig(
                thinking_budget=options[THINKING_BUDGET]
            )
        return types.GenerateContentConfig(**settings)

    def generate(
        self,
        request: GenerationRequest,
        model: str,
        options: dict[str, Any] | None = None,
    ) -> str:
        """Run one generate_content call.

        Returns:
            str: The response text.

        Raises:
            ProviderError: On any API error status or network failure.
        """
        logger.info("[Google] Sending %s request to %s", request.operation, model)
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=self.build_contents(request),
                config=self.build_config(request, options or {}),
            )
        except genai_errors.APIError as e:
            logger.warning("[Google] %s returned status %s: %s", model, e.code, e.message)
            raise provider_error_for(e.code, e.details, e.message) from e
        except httpx.HTTPError as e:
            logger.warning("[Google] Network failure calling %s: %s", model, e)
            raise ProviderGenericError(0, None, str(e)) from e

        return self._require_text(response.text, model)
