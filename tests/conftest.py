"""Test configuration and fixtures for ScholarAI tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Mock provider responses
- Scripted provider and orchestrator fixtures
- Service, API and client factories
"""

import json
import os
from unittest.mock import Mock, patch

import pytest

from scholarai.config import CREDENTIAL_VARS, Config
from scholarai.models import GenerationRequest, Operation
from scholarai.orchestrator import RetryOrchestrator
from scholarai.providers import BaseProvider
from scholarai.service import ScholarService
from scholarai.tiers import default_tiers


class TestConstants:
    """Centralized test constants to avoid repetition across test files."""

    # API Configuration
    TEST_API_KEY = "test-key"
    FAST_MODEL = "test-fast-model"
    REASONING_MODEL = "test-reasoning-model"

    # Retry Configuration
    MAX_ATTEMPTS = 3
    BACKOFF_BASE = 1.0

    # Sample payloads
    QUIZ_TOPIC = "Thermodynamics"
    QUIZ_DIFFICULTY = "Medium"
    DOUBT_ANSWER = "### Solution\n\n1. **Step one**\n2. **Step two**"


def create_mock_chat_response(content: str | None) -> Mock:
    """Create a mock OpenAI chat completion response.

    Args:
        content: The content for the chat completion response.

    Returns:
        Mock object representing OpenAI chat completion response.
    """
    mock_response = Mock()
    mock_response.choices = [Mock(message=Mock(content=content))]
    return mock_response


def create_mock_genai_response(text: str | None) -> Mock:
    """Create a mock Google GenAI generate_content response."""
    return Mock(text=text)


def make_quiz_items(count: int = 5) -> list[dict]:
    """Build well-formed quiz items in the JSON shape models are asked for."""
    return [
        {
            "id": i,
            "question": f"Question {i} about entropy?",
            "options": ["A", "B", "C", "D"],
            "correctAnswer": i % 4,
            "explanation": f"Because {i}.",
        }
        for i in range(1, count + 1)
    ]


def make_quiz_text(count: int = 5, *, fenced: bool = False) -> str:
    text = json.dumps(make_quiz_items(count))
    return f"```json\n{text}\n```" if fenced else text


class ScriptedProvider(BaseProvider):
    """Provider double that replays a script of results and exceptions.

    Every call is recorded as ``(operation, model, options)`` so tests can
    assert on tier downgrades and option handling.
    """

    def __init__(self, script=None, kind: str = "google") -> None:
        self.script = list(script or ["ok"])
        self.kind = kind
        self.calls: list[tuple[Operation, str, dict]] = []
        self.requests: list[GenerationRequest] = []

    def generate(self, request, model, options=None):
        self.calls.append((request.operation, model, dict(options or {})))
        self.requests.append(request)
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(step, Exception):
            raise step
        return step


@pytest.fixture
def clean_env():
    """Remove every provider credential and selection variable from the environment."""
    names = {name for names in CREDENTIAL_VARS.values() for name in names}
    names |= {"SCHOLARAI_PROVIDER", "SCHOLARAI_FALLBACK_PROVIDER"}
    env = {key: value for key, value in os.environ.items() if key not in names}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def test_tiers():
    """Tier descriptors with fixed model names."""
    with (
        patch.object(Config, "GOOGLE_FAST_MODEL", TestConstants.FAST_MODEL),
        patch.object(Config, "GOOGLE_REASONING_MODEL", TestConstants.REASONING_MODEL),
    ):
        return default_tiers("google")


@pytest.fixture
def sleep_recorder():
    """Stand-in for time.sleep that records requested delays."""
    delays: list[float] = []

    def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


@pytest.fixture
def orchestrator_factory(test_tiers, sleep_recorder):
    """Factory for orchestrators around a ScriptedProvider."""

    def _create_orchestrator(script=None, kind: str = "google", max_attempts=None):
        provider = ScriptedProvider(script, kind=kind)
        return RetryOrchestrator(
            provider=provider,
            tiers=test_tiers,
            max_attempts=max_attempts or TestConstants.MAX_ATTEMPTS,
            backoff_base=TestConstants.BACKOFF_BASE,
            sleep=sleep_recorder,
        )

    return _create_orchestrator


@pytest.fixture
def service_factory(orchestrator_factory):
    """Factory for ScholarService instances with scripted providers."""

    def _create_service(script=None, fallback_script=None):
        primary = orchestrator_factory(script)
        fallback = (
            orchestrator_factory(fallback_script, kind="openrouter")
            if fallback_script is not None
            else None
        )
        return ScholarService(primary, fallback)

    return _create_service
