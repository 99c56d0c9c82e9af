"""Tests for the Google and OpenRouter provider adapters."""

import base64
from unittest.mock import patch

import httpx
import openai
import pytest
from google.genai import errors as genai_errors

from scholarai.errors import (
    EmptyResponseError,
    MissingCredentialError,
    ProviderAuthError,
    ProviderGenericError,
    ProviderOverloadedError,
    ProviderRateLimitedError,
)
from scholarai.models import GenerationRequest, ImagePayload, MessageRole, Operation, new_message
from scholarai.providers import (
    GoogleProvider,
    OpenRouterProvider,
    ProviderSettings,
    get_provider,
    settings_from_config,
)
from scholarai.tiers import THINKING_BUDGET
from tests.conftest import TestConstants, create_mock_chat_response, create_mock_genai_response

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"
PNG_BASE64 = base64.b64encode(PNG_BYTES).decode("ascii")


def make_openai_status_error(status: int, message: str = "error"):
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    response = httpx.Response(status, request=request, json={"error": {"message": message}})
    error_classes = {
        401: openai.AuthenticationError,
        429: openai.RateLimitError,
        503: openai.InternalServerError,
    }
    error_class = error_classes.get(status, openai.APIStatusError)
    return error_class(message, response=response, body={"error": {"message": message}})


@pytest.fixture
def openrouter_provider():
    return OpenRouterProvider(api_key=TestConstants.TEST_API_KEY)


@pytest.fixture
def google_provider():
    return GoogleProvider(api_key=TestConstants.TEST_API_KEY)


@pytest.fixture
def simple_request():
    return GenerationRequest(
        operation=Operation.NOTES,
        prompt="Explain osmosis",
        system_instruction="Be brief.",
        temperature=0.3,
    )


class TestProviderFactory:
    """Provider selection is explicit, never inferred from the credential."""

    @pytest.mark.parametrize(
        ("kind", "provider_class"),
        [("google", GoogleProvider), ("openrouter", OpenRouterProvider)],
    )
    def test_get_provider(self, kind, provider_class):
        provider = get_provider(ProviderSettings(kind=kind, credential="sk-or-looks-like-openrouter"))
        assert isinstance(provider, provider_class)
        assert provider.kind == kind

    def test_get_provider_unknown_kind(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            get_provider(ProviderSettings(kind="anthropic", credential="x"))

    def test_settings_repr_masks_credential(self):
        settings = ProviderSettings(kind="google", credential="secret-value")
        assert "secret-value" not in repr(settings)

    def test_settings_from_config(self, clean_env):
        with patch.dict("os.environ", {"OPENROUTER_API_KEY": "router-key"}):
            settings = settings_from_config("openrouter")
        assert settings == ProviderSettings(kind="openrouter", credential="router-key")

    def test_settings_from_config_missing_credential(self, clean_env):
        with pytest.raises(MissingCredentialError) as exc_info:
            settings_from_config("google")
        assert exc_info.value.variable_names == ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")
        assert "GEMINI_API_KEY" in exc_info.value.message

    def test_settings_from_config_unknown_kind(self, clean_env):
        with pytest.raises(ValueError, match="Unsupported provider"):
            settings_from_config("anthropic")


class TestOpenRouterProvider:
    """OpenRouter adapter request building and error mapping."""

    def test_build_messages_puts_system_first(self, simple_request):
        messages = OpenRouterProvider.build_messages(simple_request)
        assert messages == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Explain osmosis"},
        ]

    def test_build_messages_maps_model_role_to_assistant(self):
        request = GenerationRequest(
            operation=Operation.CHAT,
            messages=[
                new_message(MessageRole.MODEL, "Hello!"),
                new_message(MessageRole.USER, "Teach me vectors"),
            ],
        )
        roles = [message["role"] for message in OpenRouterProvider.build_messages(request)]
        assert roles == ["assistant", "user"]

    def test_build_messages_attaches_image_as_data_url(self):
        request = GenerationRequest(
            operation=Operation.DOUBT,
            prompt="Solve this",
            image=ImagePayload(data=PNG_BASE64, mime_type="image/png"),
        )
        content = OpenRouterProvider.build_messages(request)[-1]["content"]
        assert content[0] == {"type": "text", "text": "Solve this"}
        assert content[1]["image_url"]["url"] == f"data:image/png;base64,{PNG_BASE64}"

    def test_generate_success(self, openrouter_provider, simple_request):
        with patch.object(
            openrouter_provider.client.chat.completions,
            "create",
            return_value=create_mock_chat_response("## Osmosis"),
        ) as mock_create:
            result = openrouter_provider.generate(simple_request, "model-a")

        assert result == "## Osmosis"
        kwargs = mock_create.call_args.kwargs
        assert kwargs["model"] == "model-a"
        assert kwargs["temperature"] == 0.3
        assert kwargs["top_p"] == 0.9
        assert "response_format" not in kwargs
        assert "extra_body" not in kwargs

    def test_generate_json_mode_and_thinking_budget(self, openrouter_provider):
        request = GenerationRequest(operation=Operation.QUIZ, prompt="quiz", json_mode=True)
        with patch.object(
            openrouter_provider.client.chat.completions,
            "create",
            return_value=create_mock_chat_response("[]"),
        ) as mock_create:
            openrouter_provider.generate(request, "model-a", {THINKING_BUDGET: 1024})

        kwargs = mock_create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["extra_body"] == {"reasoning": {"max_tokens": 1024}}

    @pytest.mark.parametrize(
        ("status", "error_class", "retryable"),
        [
            (401, ProviderAuthError, False),
            (429, ProviderRateLimitedError, True),
            (503, ProviderOverloadedError, True),
            (400, ProviderGenericError, False),
        ],
    )
    def test_generate_maps_status_errors(
        self, openrouter_provider, simple_request, status, error_class, retryable
    ):
        with (
            patch.object(
                openrouter_provider.client.chat.completions,
                "create",
                side_effect=make_openai_status_error(status, "boom"),
            ),
            pytest.raises(error_class) as exc_info,
        ):
            openrouter_provider.generate(simple_request, "model-a")

        assert exc_info.value.status == status
        assert exc_info.value.retryable is retryable
        assert exc_info.value.message.startswith(f"AI Provider Error ({status})")

    def test_generate_connection_error(self, openrouter_provider, simple_request):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        with (
            patch.object(
                openrouter_provider.client.chat.completions,
                "create",
                side_effect=openai.APIConnectionError(request=request),
            ),
            pytest.raises(ProviderGenericError) as exc_info,
        ):
            openrouter_provider.generate(simple_request, "model-a")
        assert exc_info.value.status == 0

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_generate_empty_response(self, openrouter_provider, simple_request, content):
        with (
            patch.object(
                openrouter_provider.client.chat.completions,
                "create",
                return_value=create_mock_chat_response(content),
            ),
            pytest.raises(EmptyResponseError),
        ):
            openrouter_provider.generate(simple_request, "model-a")


class TestGoogleProvider:
    """Google GenAI adapter request building and error mapping."""

    def test_build_contents_with_image_on_last_turn(self, google_provider):
        request = GenerationRequest(
            operation=Operation.DOUBT,
            prompt="Solve this",
            image=ImagePayload(data=PNG_BASE64, mime_type="image/png"),
        )
        contents = google_provider.build_contents(request)

        assert len(contents) == 1
        assert contents[0].role == "user"
        assert contents[0].parts[0].text == "Solve this"
        assert contents[0].parts[1].inline_data.data == PNG_BYTES
        assert contents[0].parts[1].inline_data.mime_type == "image/png"

    def test_build_contents_keeps_chat_roles(self, google_provider):
        request = GenerationRequest(
            operation=Operation.CHAT,
            messages=[
                new_message(MessageRole.MODEL, "Hello!"),
                new_message(MessageRole.USER, "Teach me vectors"),
            ],
        )
        roles = [content.role for content in google_provider.build_contents(request)]
        assert roles == ["model", "user"]

    def test_build_config(self, google_provider):
        request = GenerationRequest(
            operation=Operation.QUIZ,
            prompt="quiz",
            system_instruction="Be strict.",
            temperature=0.7,
            json_mode=True,
        )
        generate_config = google_provider.build_config(request, {THINKING_BUDGET: 2048})

        assert generate_config.temperature == 0.7
        assert generate_config.system_instruction == "Be strict."
        assert generate_config.response_mime_type == "application/json"
        assert generate_config.thinking_config.thinking_budget == 2048

    def test_build_config_without_options(self, google_provider, simple_request):
        generate_config = google_provider.build_config(simple_request, {})
        assert generate_config.thinking_config is None
        assert generate_config.response_mime_type is None

    def test_generate_success(self, google_provider, simple_request):
        with patch.object(
            google_provider.client.models,
            "generate_content",
            return_value=create_mock_genai_response("## Osmosis"),
        ) as mock_generate:
            result = google_provider.generate(simple_request, "gemini-test")

        assert result == "## Osmosis"
        assert mock_generate.call_args.kwargs["model"] == "gemini-test"

    @pytest.mark.parametrize(
        ("status", "error_class"),
        [
            (403, ProviderAuthError),
            (429, ProviderRateLimitedError),
            (503, ProviderOverloadedError),
            (500, ProviderGenericError),
        ],
    )
    def test_generate_maps_api_errors(self, google_provider, simple_request, status, error_class):
        error_class_for_sdk = genai_errors.ClientError if status < 500 else genai_errors.ServerError
        sdk_error = error_class_for_sdk(
            status, {"error": {"code": status, "message": "quota", "status": "X"}}
        )
        with (
            patch.object(google_provider.client.models, "generate_content", side_effect=sdk_error),
            pytest.raises(error_class) as exc_info,
        ):
            google_provider.generate(simple_request, "gemini-test")

        assert exc_info.value.status == status

    def test_generate_network_error(self, google_provider, simple_request):
        with (
            patch.object(
                google_provider.client.models,
                "generate_content",
                side_effect=httpx.ConnectError("refused"),
            ),
            pytest.raises(ProviderGenericError) as exc_info,
        ):
            google_provider.generate(simple_request, "gemini-test")
        assert exc_info.value.status == 0

    def test_generate_empty_response(self, google_provider, simple_request):
        with (
            patch.object(
                google_provider.client.models,
                "generate_content",
                return_value=create_mock_genai_response(None),
            ),
            pytest.raises(EmptyResponseError),
        ):
            google_provider.generate(simple_request, "gemini-test")
