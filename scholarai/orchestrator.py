"""Bounded retry with exponential backoff and model-tier downgrade."""

import time
from collections.abc import Callable

from .config import config
from .errors import ProviderError
from .models import GenerationRequest, GenerationResult
from .providers import BaseProvider
from .tiers import ModelTier

logger = config.get_logger(__name__)


class RetryOrchestrator:
    """Runs one logical request against a provider until it succeeds or gives up.

    Each attempt is ``Attempting(tier, n)``. A rate-limit (429) or overload
    (503) failure with ``n < max_attempts`` sleeps ``backoff(n)``, moves to the
    tier's fallback if it has one and tries again. Anything else, or a
    retryable failure on the last attempt, is re-raised.
    """

    def __init__(
        self,
        provider: BaseProvider,
        tiers: dict[str, ModelTier],
        max_attempts: int | None = None,
        backoff_base: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            provider: Adapter used for every attempt.
            tiers: Tier descriptors keyed by tier name.
            max_attempts: Attempt budget per request. If None, uses config.MAX_ATTEMPTS.
            backoff_base: First backoff delay in seconds. If None, uses
                config.BACKOFF_BASE_SECONDS.
            sleep: Function used to wait between attempts.
        """
        self.provider = provider
        self.tiers = tiers
        self.max_attempts = max(1, max_attempts or config.MAX_ATTEMPTS)
        self.backoff_base = (
            backoff_base if backoff_base is not None else config.BACKOFF_BASE_SECONDS
        )
        self.sleep = sleep

    def backoff(self, attempt: int) -> float:
        """Delay after failed attempt number ``attempt`` (1-based): base, 2*base, 4*base..."""
        return self.backoff_base * 2 ** (attempt - 1)

    def downgrade(self, tier: ModelTier) -> ModelTier:
        if tier.fallback and tier.fallback in self.tiers:
            fallback = self.tiers[tier.fallback]
            logger.info(
                "Downgrading from %s (%s) to %s (%s)",
                tier.name,
                tier.model,
                fallback.name,
                fallback.model,
            )
            return fallback
        return tier

    def run(self, request: GenerationRequest, tier_name: str) -> GenerationResult:
        """Execute ``request`` starting on ``tier_name``.

        Returns:
            GenerationResult: Text plus the provider, model and tier that answered.

        Raises:
            KeyError: If ``tier_name`` is not a known tier.
            ProviderError: The last provider error once retries are exhausted,
                or the first non-retryable one.
            EmptyResponseError: If the provider answered without text.
        """
        tier = self.tiers[tier_name]
        attempt = 1

        while True:
            options, dropped = tier.resolve_options(request.options)
            if dropped:
                logger.warning(
                    "Tier %s (%s) does not support %s; dropping for this attempt",
                    tier.name,
                    tier.model,
                    ", ".join(dropped),
                )

            logger.info(
                "Attempt %d/%d: %s on %s via %s",
                attempt,
                self.max_attempts,
                request.operation,
                tier.model,
                self.provider.kind,
            )
            try:
                text = self.provider.generate(request, tier.model, options)
            except ProviderError as e:
                if not e.retryable or attempt >= self.max_attempts:
                    logger.error(
                        "%s failed on attempt %d/%d: %s",
                        request.operation,
                        attempt,
                        self.max_attempts,
                        e.message,
                    )
                    raise
                delay = self.backoff(attempt)
                logger.warning(
                    "Retryable error (%s) on attempt %d; retrying in %.1fs",
                    e.status,
                    attempt,
                    delay,
                )
                self.sleep(delay)
                tier = self.downgrade(tier)
                attempt += 1
            else:
                return GenerationResult(
                    text=text,
                    provider=self.provider.kind,
                    model=tier.model,
                    tier=tier.name,
                    attempts=attempt,
                )
