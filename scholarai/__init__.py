"""ScholarAI - education assistant backed by hosted LLM providers."""

from .client import ScholarClient
from .local_store import LocalStore
from .models import (
    ChatMessage,
    GenerationRequest,
    GenerationResult,
    ImagePayload,
    MessageRole,
    Operation,
    QuizQuestion,
    UserProfile,
)
from .orchestrator import RetryOrchestrator
from .postprocess import parse_quiz, strip_code_fences
from .providers import GoogleProvider, OpenRouterProvider, ProviderSettings, get_provider
from .service import ScholarService
from .tiers import ModelTier, default_tiers

__all__ = [
    "ChatMessage",
    "GenerationRequest",
    "GenerationResult",
    "GoogleProvider",
    "ImagePayload",
    "LocalStore",
    "MessageRole",
    "ModelTier",
    "Operation",
    "OpenRouterProvider",
    "ProviderSettings",
    "QuizQuestion",
    "RetryOrchestrator",
    "ScholarClient",
    "ScholarService",
    "UserProfile",
    "default_tiers",
    "get_provider",
    "parse_quiz",
    "strip_code_fences",
]
