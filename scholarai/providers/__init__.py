"""Provider adapters and factory."""

from __future__ import annotations

from typing import cast

from scholarai.config import CREDENTIAL_VARS, config
from scholarai.errors import MissingCredentialError

from .base import BaseProvider, ProviderKind, ProviderSettings
from .google import GoogleProvider
from .openrouter import OpenRouterProvider


def get_provider(settings: ProviderSettings) -> BaseProvider:
    """Return a configured provider adapter.

    Raises:
        ValueError: If an unsupported provider kind is requested.
    """
    kind = settings.kind.lower()

    if kind == "google":
        return GoogleProvider(api_key=settings.credential)

    if kind == "openrouter":
        return OpenRouterProvider(api_key=settings.credential)

    msg = f"Unsupported provider: {settings.kind}"
    raise ValueError(msg)


def settings_from_config(provider: str | None = None) -> ProviderSettings:
    """Build provider settings from the environment.

    Raises:
        ValueError: If the provider kind is unknown.
        MissingCredentialError: If none of the provider's credential variables is set.
    """
    kind = (provider or config.PROVIDER).lower()
    if kind not in CREDENTIAL_VARS:
        msg = f"Unsupported provider: {kind}"
        raise ValueError(msg)

    credential = config.get_credential(kind)
    if not credential:
        raise MissingCredentialError(config.credential_vars(kind))
    return ProviderSettings(kind=cast("ProviderKind", kind), credential=credential)


__all__ = [
    "BaseProvider",
    "GoogleProvider",
    "OpenRouterProvider",
    "ProviderKind",
    "ProviderSettings",
    "get_provider",
    "settings_from_config",
]
