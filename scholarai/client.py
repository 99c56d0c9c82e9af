"""Client service layer used by the UI, with a direct-to-provider escape hatch."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, cast

import httpx

from .config import CREDENTIAL_VARS, config
from .errors import (
    BackendError,
    BackendUnreachableError,
    MissingLocalCredentialError,
    UnsupportedLocalProviderError,
)
from .local_store import LocalStore
from .postprocess import questions_from_items
from .providers import ProviderKind, ProviderSettings
from .service import ScholarService

if TYPE_CHECKING:
    from .models import ChatMessage, QuizQuestion

logger = config.get_logger(__name__)

ServiceFactory = Callable[[ProviderSettings], ScholarService]


class ScholarClient:
    """Calls the ScholarAI endpoint and falls back to the provider when it is down."""

    def __init__(
        self,
        backend_url: str | None = None,
        store: LocalStore | None = None,
        http_client: httpx.Client | None = None,
        service_factory: ServiceFactory | None = None,
    ) -> None:
        """Initialize ScholarClient.

        Args:
            backend_url: Endpoint URL. If None, uses config.BACKEND_URL.
            store: Local state holding the optional personal API key.
            http_client: HTTP client for the endpoint.
            service_factory: Builds the local service used by the escape hatch.
        """
        self.backend_url = backend_url or config.BACKEND_URL
        self.store = store or LocalStore()
        self.http = http_client or httpx.Client(timeout=config.REQUEST_TIMEOUT)
        self.service_factory = service_factory or ScholarService.from_settings

    def call(self, endpoint: str, payload: dict[str, Any]) -> Any:
        """Run an operation on the server, or directly if the server is unreachable.

        Returns:
            Any: The ``result`` value of the operation.

        Raises:
            BackendError: If the server answered with an error message.
            MissingLocalCredentialError: If the server is unreachable and no
                personal API key is stored.
            UnsupportedLocalProviderError: If the server is unreachable and the
                saved provider is neither google nor openrouter.
        """
        try:
            return self._call_backend(endpoint, payload)
        except BackendUnreachableError as e:
            logger.warning("Service call [%s] could not reach the server: %s", endpoint, e)
            return self._call_direct(endpoint, payload)

    def _call_backend(self, endpoint: str, payload: dict[str, Any]) -> Any:
        try:
            response = self.http.post(self.backend_url, json={"endpoint": endpoint, **payload})
        except httpx.TransportError as e:
            raise BackendUnreachableError from e

        try:
            data = response.json()
        except ValueError as e:
            msg = f"The server returned a non-JSON response (status {response.status_code})."
            raise BackendUnreachableError(msg) from e
        if not isinstance(data, dict):
            msg = f"The server returned an unexpected response (status {response.status_code})."
            raise BackendUnreachableError(msg)

        if response.is_error:
            message = data.get("error") or f"Server Error: {response.status_code}"
            logger.error("Service call [%s] failed: %s", endpoint, message)
            raise BackendError(message, response.status_code)
        return data.get("result")

    def _call_direct(self, endpoint: str, payload: dict[str, Any]) -> Any:
        credential = self.store.api_key
        if not credential:
            raise MissingLocalCredentialError
        kind = self.store.provider
        if not isinstance(kind, str) or kind not in CREDENTIAL_VARS:
            logger.warning("Stored provider %r is not supported for direct calls", kind)
            raise UnsupportedLocalProviderError(kind)
        settings = ProviderSettings(kind=cast("ProviderKind", kind), credential=credential)
        logger.info("Running [%s] directly against %s with the local key", endpoint, settings.kind)
        return self.service_factory(settings).dispatch(endpoint, payload)

    def chat_with_coach(
        self, history: Sequence[ChatMessage], new_message: str, user_context: str
    ) -> str:
        return self.call(
            "chat",
            {
                "history": [message.to_payload() for message in history],
                "newMessage": new_message,
                "userContext": user_context,
            },
        )

    def generate_notes(self, topic: str) -> str:
        return self.call("notes", {"topic": topic})

    def solve_doubt(
        self, doubt: str, image_base64: str | None = None, mime_type: str | None = None
    ) -> str:
        payload: dict[str, Any] = {"doubt": doubt}
        if image_base64:
            payload["image"] = image_base64
            if mime_type:
                payload["mimeType"] = mime_type
        return self.call("doubt", payload)

    def generate_quiz(self, topic: str, difficulty: str) -> list[QuizQuestion]:
        result = self.call("quiz", {"topic": topic, "difficulty": difficulty})
        return questions_from_items(result) if isinstance(result, list) else []

    def get_career_advice(self, profile: str, query: str) -> str:
        return self.call("career", {"profile": profile, "query": query})

    def generate_study_plan(self, details: dict[str, Any]) -> str:
        return self.call("plan", {"details": details})
