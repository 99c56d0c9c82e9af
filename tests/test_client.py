"""Tests for ScholarClient and its direct-to-provider escape hatch."""

import json

import httpx
import pytest

from scholarai.client import ScholarClient
from scholarai.errors import (
    BackendError,
    MissingLocalCredentialError,
    UnsupportedLocalProviderError,
)
from scholarai.local_store import LocalStore
from scholarai.models import MessageRole, QuizQuestion, new_message
from scholarai.providers import ProviderSettings
from tests.conftest import TestConstants, make_quiz_items, make_quiz_text

BACKEND_URL = "http://backend.test/api/gemini"


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "state.json")


@pytest.fixture
def client_factory(store, service_factory):
    """Factory for ScholarClients over a mock transport.

    ``handler`` answers the backend call. The direct path uses a scripted
    service, recorded in ``client.direct_settings``.
    """

    def _create_client(handler, direct_script=None):
        direct_settings: list[ProviderSettings] = []
        service = service_factory(direct_script)

        def _service_for(settings):
            direct_settings.append(settings)
            return service

        http = httpx.Client(transport=httpx.MockTransport(handler))
        client = ScholarClient(
            backend_url=BACKEND_URL,
            store=store,
            http_client=http,
            service_factory=_service_for,
        )
        client.direct_settings = direct_settings
        client.direct_service = service
        return client

    return _create_client


def json_handler(status: int, payload, seen=None):
    def _handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(json.loads(request.content))
        return httpx.Response(status, json=payload)

    return _handler


def html_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, text="<!DOCTYPE html><html>Not Found</html>")


def refused_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


class TestBackendCalls:
    def test_notes_returns_result(self, client_factory):
        seen = []
        client = client_factory(json_handler(200, {"result": "## Notes"}, seen))

        assert client.generate_notes("Optics") == "## Notes"
        assert seen == [{"endpoint": "notes", "topic": "Optics"}]

    def test_chat_sends_wire_history(self, client_factory):
        seen = []
        client = client_factory(json_handler(200, {"result": "Hi"}, seen))
        history = [new_message(MessageRole.MODEL, "Hello!")]

        client.chat_with_coach(history, "Teach me", "Grade: Class 9")

        body = seen[0]
        assert body["endpoint"] == "chat"
        assert body["newMessage"] == "Teach me"
        assert body["userContext"] == "Grade: Class 9"
        assert body["history"][0]["role"] == "model"

    def test_doubt_with_image(self, client_factory):
        seen = []
        client = client_factory(json_handler(200, {"result": "Solved"}, seen))

        client.solve_doubt("", "aGVsbG8=", "image/png")

        assert seen[0] == {
            "endpoint": "doubt",
            "doubt": "",
            "image": "aGVsbG8=",
            "mimeType": "image/png",
        }

    def test_quiz_returns_questions(self, client_factory):
        client = client_factory(json_handler(200, {"result": make_quiz_items(5)}))

        questions = client.generate_quiz("Thermodynamics", "Medium")

        assert len(questions) == 5
        assert all(isinstance(question, QuizQuestion) for question in questions)

    def test_quiz_non_list_result_is_empty(self, client_factory):
        client = client_factory(json_handler(200, {"result": "oops"}))
        assert client.generate_quiz("x", "Easy") == []

    def test_plan_and_career(self, client_factory):
        seen = []
        client = client_factory(json_handler(200, {"result": "ok"}, seen))

        client.generate_study_plan({"subjects": "Physics"})
        client.get_career_advice("Grade: Class 12", "Scope of law?")

        assert seen[0] == {"endpoint": "plan", "details": {"subjects": "Physics"}}
        assert seen[1] == {
            "endpoint": "career",
            "profile": "Grade: Class 12",
            "query": "Scope of law?",
        }

    @pytest.mark.parametrize(
        ("status", "message"),
        [
            (500, "Server Configuration Error: API key missing."),
            (429, "AI Provider Error (429): quota"),
            (400, "Invalid endpoint"),
        ],
    )
    def test_json_error_raises_backend_error(self, client_factory, status, message):
        client = client_factory(json_handler(status, {"error": message}))

        with pytest.raises(BackendError) as exc_info:
            client.generate_notes("Optics")

        assert exc_info.value.message == message
        assert exc_info.value.status_code == status
        assert client.direct_settings == []

    def test_json_error_without_message(self, client_factory):
        client = client_factory(json_handler(502, {}))

        with pytest.raises(BackendError, match="Server Error: 502"):
            client.generate_notes("Optics")


class TestEscapeHatch:
    """When the server is unreachable the client calls the provider with the local key."""

    @pytest.mark.parametrize("handler", [html_handler, refused_handler])
    def test_unreachable_without_key_raises(self, client_factory, handler):
        client = client_factory(handler)

        with pytest.raises(MissingLocalCredentialError) as exc_info:
            client.generate_notes("Optics")

        assert "Enter your API key in Settings" in exc_info.value.message
        assert client.direct_service.orchestrator.provider.calls == []

    @pytest.mark.parametrize("handler", [html_handler, refused_handler])
    def test_unreachable_with_key_calls_provider(self, client_factory, store, handler):
        store.api_key = TestConstants.TEST_API_KEY
        store.provider = "openrouter"
        client = client_factory(handler, ["## Direct notes"])

        assert client.generate_notes("Optics") == "## Direct notes"
        assert client.direct_settings == [
            ProviderSettings(kind="openrouter", credential=TestConstants.TEST_API_KEY)
        ]

    @pytest.mark.parametrize("stored", ["anthropic", ["google"], 3])
    def test_unknown_stored_provider_asks_for_settings(self, client_factory, store, stored):
        store.api_key = TestConstants.TEST_API_KEY
        store.set("provider", stored)
        client = client_factory(html_handler, ["never used"])

        with pytest.raises(UnsupportedLocalProviderError) as exc_info:
            client.generate_notes("Optics")

        assert exc_info.value.status_code == 400
        assert "Choose google or openrouter in Settings" in exc_info.value.message
        assert client.direct_settings == []

    def test_direct_quiz_returns_questions(self, client_factory, store):
        store.api_key = TestConstants.TEST_API_KEY
        client = client_factory(html_handler, [make_quiz_text(5, fenced=True)])

        questions = client.generate_quiz("Thermodynamics", "Medium")

        assert len(questions) == 5
        assert all(len(question.options) == 4 for question in questions)

    def test_non_object_json_is_treated_as_unreachable(self, client_factory, store):
        store.api_key = TestConstants.TEST_API_KEY
        client = client_factory(json_handler(200, ["unexpected"]), ["direct"])

        assert client.generate_notes("Optics") == "direct"
