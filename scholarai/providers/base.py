"""Shared pieces of the provider adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from scholarai.errors import EmptyResponseError

if TYPE_CHECKING:
    from scholarai.models import GenerationRequest

ProviderKind = Literal["google", "openrouter"]


@dataclass(frozen=True)
class ProviderSettings:
    """Explicit provider selection supplied by deployment configuration."""

    kind: ProviderKind
    credential: str

    def __repr__(self) -> str:
        return f"ProviderSettings(kind={self.kind!r}, credential='***')"


class BaseProvider(ABC):
    """Translates a GenerationRequest into one provider call."""

    kind: str = ""

    @abstractmethod
    def generate(
        self,
        request: GenerationRequest,
        model: str,
        options: dict[str, Any] | None = None,
    ) -> str:
        """Run one generation call and return the response text.

        Raises:
            ProviderError: If the provider answers with a non-2xx status.
            EmptyResponseError: If the provider answers without text.
        """

    @staticmethod
    def _require_text(text: str | None, model: str) -> str:
        if text is None or not text.strip():
            msg = f"The AI model '{model}' returned an empty response. Please try again."
            raise EmptyResponseError(msg)
        return text
