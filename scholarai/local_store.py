"""Client-only persisted state: theme, personal API key and the signed-in profile."""

import json
from pathlib import Path
from typing import Any

from .config import CREDENTIAL_VARS, config
from .models import UserProfile

logger = config.get_logger(__name__)

THEME_KEY = "theme"
API_KEY_KEY = "api_key"
PROVIDER_KEY = "provider"
USER_KEY = "user"

DEFAULT_THEME = "light"
DEFAULT_PROVIDER = "google"


class LocalStore:
    """Small JSON key-value file kept on the user's machine, never sent to the server."""

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON file. If None, uses config.STATE_PATH.
        """
        self.path = Path(path) if path is not None else config.STATE_PATH

    def load(self) -> dict[str, Any]:
        """Read the whole state; a missing or unreadable file counts as empty.

        Returns:
            dict[str, Any]: Stored values.
        """
        if not self.path.exists():
            return {}
        try:
            with self.path.open(encoding="utf-8") as file:
                data = json.load(file)
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable state file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as file:
            json.dump(data, file, ensure_ascii=False, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self.load()
        data[key] = value
        self.save(data)

    def remove(self, key: str) -> None:
        data = self.load()
        if data.pop(key, None) is not None:
            self.save(data)

    @property
    def theme(self) -> str:
        return self.get(THEME_KEY, DEFAULT_THEME)

    @theme.setter
    def theme(self, value: str) -> None:
        self.set(THEME_KEY, value)

    @property
    def api_key(self) -> str:
        return (self.get(API_KEY_KEY) or "").strip()

    @api_key.setter
    def api_key(self, value: str | None) -> None:
        if value and value.strip():
            self.set(API_KEY_KEY, value.strip())
        else:
            self.remove(API_KEY_KEY)

    @property
    def provider(self) -> str:
        return self.get(PROVIDER_KEY, DEFAULT_PROVIDER)

    @provider.setter
    def provider(self, value: str) -> None:
        kind = value.lower()
        if kind not in CREDENTIAL_VARS:
            msg = f"Unsupported provider: {value!r}. Choose one of: {', '.join(CREDENTIAL_VARS)}"
            raise ValueError(msg)
        self.set(PROVIDER_KEY, kind)

    @property
    def user(self) -> UserProfile | None:
        data = self.get(USER_KEY)
        if not isinstance(data, dict):
            return None
        try:
            return UserProfile(**data)
        except TypeError:
            logger.warning("Ignoring stored profile with unexpected fields")
            return None

    @user.setter
    def user(self, profile: UserProfile | None) -> None:
        if profile is None:
            self.remove(USER_KEY)
        else:
            self.set(USER_KEY, profile.to_dict())
