"""Configuration management for ScholarAI."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"

if env_path.exists():
    load_dotenv(env_path)

GOOGLE_CREDENTIAL_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")
OPENROUTER_CREDENTIAL_VARS = ("OPENROUTER_API_KEY", "OPENAI_API_KEY")

CREDENTIAL_VARS: dict[str, tuple[str, ...]] = {
    "google": GOOGLE_CREDENTIAL_VARS,
    "openrouter": OPENROUTER_CREDENTIAL_VARS,
}


class Config:
    """Application configuration loaded from environment variables."""

    # Provider Configuration
    PROVIDER: str = os.getenv("SCHOLARAI_PROVIDER", "google").lower()
    FALLBACK_PROVIDER: str | None = (
        os.getenv("SCHOLARAI_FALLBACK_PROVIDER", "").lower() or None
    )

    @classmethod
    def get_credential(cls, provider: str | None = None) -> str:
        """Get the API credential for a provider from environment variables.

        Candidate variables are checked in order and the first non-empty one
        wins.

        Args:
            provider: Provider kind. If None, uses the configured PROVIDER.

        Returns:
            The credential, or an empty string if none of the candidates is set.
        """
        kind = (provider or cls.PROVIDER).lower()
        for name in CREDENTIAL_VARS.get(kind, ()):
            value = os.getenv(name, "").strip()
            if value:
                return value
        return ""

    @classmethod
    def credential_vars(cls, provider: str | None = None) -> tuple[str, ...]:
        """Return the environment variable names searched for a provider."""
        return CREDENTIAL_VARS.get((provider or cls.PROVIDER).lower(), ())

    # Model Tier Configuration
    GOOGLE_FAST_MODEL: str = os.getenv("GOOGLE_FAST_MODEL", "gemini-2.5-flash")
    GOOGLE_REASONING_MODEL: str = os.getenv("GOOGLE_REASONING_MODEL", "gemini-2.5-pro")
    OPENROUTER_FAST_MODEL: str = os.getenv(
        "OPENROUTER_FAST_MODEL", "google/gemini-2.0-flash-001"
    )
    OPENROUTER_REASONING_MODEL: str = os.getenv(
        "OPENROUTER_REASONING_MODEL", "google/gemini-2.5-pro"
    )
    REASONING_THINKING_BUDGET: int = int(os.getenv("REASONING_THINKING_BUDGET", "8192"))

    # OpenRouter Configuration
    OPENROUTER_BASE_URL: str = os.getenv(
        "OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"
    )
    SITE_URL: str = os.getenv("SITE_URL", "https://scholarai.vercel.app")
    SITE_NAME: str = os.getenv("SITE_NAME", "ScholarAI")

    # Retry Configuration
    MAX_ATTEMPTS: int = int(os.getenv("MAX_ATTEMPTS", "3"))
    BACKOFF_BASE_SECONDS: float = float(os.getenv("BACKOFF_BASE_SECONDS", "1.0"))
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "60"))

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    PROVIDER_LOG_LEVEL: str = os.getenv("PROVIDER_LOG_LEVEL", "WARNING").upper()

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Server / Client Settings
    API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    BACKEND_URL: str = os.getenv("BACKEND_URL", "http://127.0.0.1:8000/api/gemini")
    STATE_PATH: Path = Path(
        os.getenv("SCHOLARAI_STATE_PATH", str(Path.home() / ".scholarai" / "state.json"))
    )

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration values.

        Raises:
            ValueError: If the provider is unknown or its credential is not set.
        """
        if cls.PROVIDER not in CREDENTIAL_VARS:
            msg = (
                f"Unknown SCHOLARAI_PROVIDER '{cls.PROVIDER}'. "
                f"Expected one of: {', '.join(sorted(CREDENTIAL_VARS))}."
            )
            raise ValueError(msg)
        if not cls.get_credential():
            names = " or ".join(cls.credential_vars())
            msg = f"{names} is required. Please set it in .env file or environment."
            raise ValueError(msg)

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment.

        Returns:
            True if environment is development.
        """
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment.

        Returns:
            True if environment is production.
        """
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def setup_logging(cls) -> None:
        """Setup basic logging configuration.

        Configure logging once at process startup with console output, a
        simple format and a level taken from LOG_LEVEL. Provider SDK loggers
        are capped at PROVIDER_LOG_LEVEL.
        """
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )

        provider_level = getattr(logging, cls.PROVIDER_LOG_LEVEL, logging.WARNING)
        for name in ("openai", "httpx", "google_genai"):
            logging.getLogger(name).setLevel(provider_level)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger with the specified name.

        Args:
            name: Logger name (typically __name__)

        Returns:
            Logger instance
        """
        return logging.getLogger(name)

    @classmethod
    def get_openrouter_headers(cls) -> dict[str, str]:
        """Build the attribution headers OpenRouter expects on every call.

        Returns:
            Mapping of header names to values used on outbound HTTP requests.
        """
        headers: dict[str, str] = {}

        if cls.SITE_URL:
            headers["HTTP-Referer"] = cls.SITE_URL

        if cls.SITE_NAME:
            headers["X-Title"] = cls.SITE_NAME

        return headers


config = Config()
