"""Operation dispatch: payload in, Markdown or quiz questions out."""

import time
from collections.abc import Callable, Sequence
from typing import Any

from . import prompts
from .config import config
from .errors import MissingCredentialError, ProviderError
from .models import (
    ChatMessage,
    GenerationRequest,
    GenerationResult,
    ImagePayload,
    Operation,
    QuizQuestion,
)
from .orchestrator import RetryOrchestrator
from .postprocess import parse_quiz, quiz_payload
from .providers import ProviderSettings, get_provider, settings_from_config
from .schemas import (
    CareerPayload,
    ChatPayload,
    DoubtPayload,
    NotesPayload,
    PlanPayload,
    QuizPayload,
    parse_operation,
    parse_payload,
)
from .tiers import default_tiers

logger = config.get_logger(__name__)


def build_orchestrator(
    settings: ProviderSettings, sleep: Callable[[float], None] = time.sleep
) -> RetryOrchestrator:
    """Wire a provider adapter and its tiers into an orchestrator."""
    return RetryOrchestrator(
        provider=get_provider(settings),
        tiers=default_tiers(settings.kind),
        sleep=sleep,
    )


class ScholarService:
    """Runs ScholarAI operations through a primary and optional secondary provider."""

    def __init__(
        self,
        orchestrator: RetryOrchestrator,
        fallback: RetryOrchestrator | None = None,
    ) -> None:
        """Initialize ScholarService.

        Args:
            orchestrator: Primary provider orchestrator.
            fallback: Orchestrator for a second provider, tried only when the
                primary gives up on a rate-limit or overload error.
        """
        self.orchestrator = orchestrator
        self.fallback = fallback
        self.last_result: GenerationResult | None = None

    @classmethod
    def from_settings(
        cls,
        settings: ProviderSettings,
        fallback_settings: ProviderSettings | None = None,
    ) -> "ScholarService":
        fallback = build_orchestrator(fallback_settings) if fallback_settings else None
        return cls(build_orchestrator(settings), fallback)

    @classmethod
    def from_config(cls) -> "ScholarService":
        """Build the service from environment configuration.

        Raises:
            MissingCredentialError: If the primary provider has no credential.
        """
        settings = settings_from_config()
        fallback_settings = None
        if config.FALLBACK_PROVIDER and config.FALLBACK_PROVIDER != settings.kind:
            try:
                fallback_settings = settings_from_config(config.FALLBACK_PROVIDER)
            except (MissingCredentialError, ValueError):
                logger.warning(
                    "Fallback provider %s is not usable; continuing without it",
                    config.FALLBACK_PROVIDER,
                )
        return cls.from_settings(settings, fallback_settings)

    def generate(self, request: GenerationRequest) -> GenerationResult:
        tier = prompts.tier_for(request.operation)
        try:
            result = self.orchestrator.run(request, tier)
        except ProviderError as e:
            if not (e.retryable and self.fallback):
                raise
            logger.warning(
                "%s exhausted retries on %s (%s); switching to %s",
                request.operation,
                self.orchestrator.provider.kind,
                e.status,
                self.fallback.provider.kind,
            )
            result = self.fallback.run(request, tier)

        logger.info(
            "%s answered by %s/%s after %d attempt(s)",
            request.operation,
            result.provider,
            result.model,
            result.attempts,
        )
        self.last_result = result
        return result

    def chat(
        self, history: Sequence[ChatMessage], new_message: str, user_context: str
    ) -> str:
        request = prompts.build_chat_request(history, new_message, user_context)
        return self.generate(request).text

    def notes(self, topic: str) -> str:
        return self.generate(prompts.build_notes_request(topic)).text

    def doubt(self, doubt: str, image: ImagePayload | None = None) -> str:
        return self.generate(prompts.build_doubt_request(doubt, image)).text

    def quiz(self, topic: str, difficulty: str) -> list[QuizQuestion]:
        """Generate a quiz; malformed model output yields an empty list."""
        result = self.generate(prompts.build_quiz_request(topic, difficulty))
        questions = parse_quiz(result.text)
        if not questions:
            logger.warning("Quiz for %r produced no usable questions", topic)
        return questions

    def career(self, profile: str, query: str) -> str:
        return self.generate(prompts.build_career_request(profile, query)).text

    def plan(self, details: dict[str, Any]) -> str:
        return self.generate(prompts.build_plan_request(details)).text

    def dispatch(self, endpoint: Any, body: dict[str, Any]) -> str | list[dict[str, Any]]:
        """Run the operation named by ``endpoint`` with the fields in ``body``.

        Returns:
            str | list[dict[str, Any]]: Markdown text, or quiz questions in
                their JSON shape.

        Raises:
            InvalidRequestError: If the endpoint or its fields are invalid.
            ScholarAIError: If generation fails.
        """
        operation = parse_operation(endpoint)
        payload = parse_payload(operation, body)
        handlers: dict[Operation, Callable[[Any], str | list[dict[str, Any]]]] = {
            Operation.CHAT: self._run_chat,
            Operation.NOTES: self._run_notes,
            Operation.DOUBT: self._run_doubt,
            Operation.QUIZ: self._run_quiz,
            Operation.CAREER: self._run_career,
            Operation.PLAN: self._run_plan,
        }
        return handlers[operation](payload)

    def _run_chat(self, payload: ChatPayload) -> str:
        history = [message.to_message() for message in payload.history]
        return self.chat(history, payload.new_message, payload.user_context)

    def _run_notes(self, payload: NotesPayload) -> str:
        return self.notes(payload.topic)

    def _run_doubt(self, payload: DoubtPayload) -> str:
        return self.doubt(payload.doubt, payload.image_payload())

    def _run_quiz(self, payload: QuizPayload) -> list[dict[str, Any]]:
        return quiz_payload(self.quiz(payload.topic, payload.difficulty))

    def _run_career(self, payload: CareerPayload) -> str:
        return self.career(payload.profile, payload.query)

    def _run_plan(self, payload: PlanPayload) -> str:
        return self.plan(payload.details.as_prompt_fields())
