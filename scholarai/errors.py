"""Error taxonomy shared by the server, the orchestrator and the client."""

from __future__ import annotations

from typing import Any


class ScholarAIError(Exception):
    """Base class for errors that are shown to the user as a message."""

    status_code: int = 500
    default_message = "An unexpected error occurred. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredentialError(ScholarAIError):
    """The server has no provider credential configured."""

    status_code = 500

    def __init__(self, variable_names: tuple[str, ...] = ()) -> None:
        names = " or ".join(variable_names) or "a provider API key"
        super().__init__(
            "Server Configuration Error: API key missing. "
            f"Set {names} in the deployment environment and redeploy."
        )
        self.variable_names = variable_names


class InvalidRequestError(ScholarAIError):
    """Unknown endpoint or missing/invalid operation fields."""

    status_code = 400
    default_message = "Invalid request."


class ProviderError(ScholarAIError):
    """A provider call returned a non-2xx status."""

    status_code = 502
    retryable = False

    def __init__(self, status: int, body: Any = None, message: str | None = None) -> None:
        self.status = status
        self.body = body
        detail = message or _summarize_body(body)
        super().__init__(f"AI Provider Error ({status}): {detail}")


class ProviderAuthError(ProviderError):
    """The provider rejected the credential as invalid or expired."""

    status_code = 502


class ProviderRateLimitedError(ProviderError):
    """HTTP 429: quota or rate limit exceeded."""

    status_code = 429
    retryable = True


class ProviderOverloadedError(ProviderError):
    """HTTP 503: the model is overloaded."""

    status_code = 503
    retryable = True


class ProviderGenericError(ProviderError):
    """Any other non-2xx provider response, or a network failure (status 0)."""


class EmptyResponseError(ScholarAIError):
    """The provider answered with no text."""

    status_code = 502
    default_message = "The AI returned an empty response. Please try again."


class MalformedResponseError(ScholarAIError):
    """Expected JSON could not be parsed."""

    status_code = 502
    default_message = "The AI returned a response that could not be read."


class BackendUnreachableError(ScholarAIError):
    """The ScholarAI server answered with something other than JSON, or not at all."""

    status_code = 503
    default_message = (
        "The ScholarAI server could not be reached. "
        "Add your own API key in Settings to keep working offline from the server."
    )


class MissingLocalCredentialError(ScholarAIError):
    """The escape hatch needs a locally stored key and none is saved."""

    status_code = 401
    default_message = (
        "The server is unreachable and no personal API key is saved. "
        "Enter your API key in Settings to continue."
    )


class UnsupportedLocalProviderError(ScholarAIError):
    """The locally saved provider is not one the escape hatch can call."""

    status_code = 400

    def __init__(self, provider: str) -> None:
        super().__init__(
            f"The saved AI provider {provider!r} is not supported. "
            "Choose google or openrouter in Settings to continue."
        )
        self.provider = provider


class BackendError(ScholarAIError):
    """The ScholarAI server answered with a JSON error body."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code


def provider_error_for(status: int, body: Any = None, message: str | None = None) -> ProviderError:
    """Pick the ProviderError subclass matching an HTTP status.

    Returns:
        ProviderError: An instance of the subclass for ``status``.
    """
    if status in {401, 403}:
        return ProviderAuthError(status, body, message)
    if status == 429:
        return ProviderRateLimitedError(status, body, message)
    if status == 503:
        return ProviderOverloadedError(status, body, message)
    return ProviderGenericError(status, body, message)


def _summarize_body(body: Any, limit: int = 200) -> str:
    if body is None:
        return "no details"
    text = body if isinstance(body, str) else repr(body)
    return text[:limit]
