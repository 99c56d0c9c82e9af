"""Model tiers and the request options each tier accepts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config import config

FAST = "fast"
REASONING = "reasoning"

THINKING_BUDGET = "thinking_budget"


@dataclass(frozen=True)
class ModelTier:
    """A named model variant and its capability descriptor."""

    name: str
    model: str
    supported_options: frozenset[str] = frozenset()
    default_options: dict[str, Any] = field(default_factory=dict)
    fallback: str | None = None

    def supports(self, option: str) -> bool:
        return option in self.supported_options

    def resolve_options(self, requested: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
        """Merge tier defaults with request options, keeping only supported ones.

        Returns:
            tuple[dict[str, Any], list[str]]: The effective options and the
                names of the options that were dropped.
        """
        merged = {**self.default_options, **requested}
        kept = {key: value for key, value in merged.items() if self.supports(key)}
        dropped = sorted(key for key in merged if key not in kept)
        return kept, dropped


def default_tiers(provider: str) -> dict[str, ModelTier]:
    """Return the fast and reasoning tiers for a provider kind.

    Raises:
        ValueError: If the provider kind is unknown.
    """
    kind = provider.lower()
    if kind == "google":
        fast_model = config.GOOGLE_FAST_MODEL
        reasoning_model = config.GOOGLE_REASONING_MODEL
    elif kind == "openrouter":
        fast_model = config.OPENROUTER_FAST_MODEL
        reasoning_model = config.OPENROUTER_REASONING_MODEL
    else:
        msg = f"Unsupported provider: {provider}"
        raise ValueError(msg)

    return {
        FAST: ModelTier(name=FAST, model=fast_model),
        REASONING: ModelTier(
            name=REASONING,
            model=reasoning_model,
            supported_options=frozenset({THINKING_BUDGET}),
            default_options={THINKING_BUDGET: config.REASONING_THINKING_BUDGET},
            fallback=FAST,
        ),
    }
