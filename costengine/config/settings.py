"""Cost engine configuration settings.

Loads configuration from environment variables with sensible defaults.
Secrets are read through config.secrets, never directly from this class.
"""

import os
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file for non-secret configuration (timeouts, model names, etc.)
load_dotenv()


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Note: OPENAI_API_KEY should be accessed via the config.secrets module.
    The openai_api_key property delegates to it.
    """

    # Requirement insight (LLM) configuration
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o"))
    llm_temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.3")))
    insight_timeout_seconds: float = field(default_factory=lambda: float(os.getenv("INSIGHT_TIMEOUT_SECONDS", "10")))
    insight_max_attempts: int = field(default_factory=lambda: int(os.getenv("INSIGHT_MAX_ATTEMPTS", "2")))

    # Estimate configuration
    estimate_validity_days: int = field(default_factory=lambda: int(os.getenv("ESTIMATE_VALIDITY_DAYS", "30")))
    default_square_footage: float = field(default_factory=lambda: float(os.getenv("DEFAULT_SQUARE_FOOTAGE", "2000")))
    comparable_limit: int = field(default_factory=lambda: int(os.getenv("COMPARABLE_LIMIT", "5")))

    # Optional JSON file replacing the built-in rate tables
    rate_tables_path: Optional[str] = field(default_factory=lambda: os.getenv("RATE_TABLES_PATH"))

    # Historical comparables backend: "memory" or "firestore"
    comparable_store_backend: str = field(default_factory=lambda: os.getenv("COMPARABLE_STORE_BACKEND", "memory"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Internal: cached secret value (use openai_api_key property instead)
    _openai_api_key: Optional[str] = field(default=None, repr=False)

    @property
    def openai_api_key(self) -> Optional[str]:
        """Get OpenAI API key from the secrets module."""
        if self._openai_api_key is None:
            from costengine.config.secrets import get_openai_api_key
            self._openai_api_key = get_openai_api_key()
        return self._openai_api_key

    @property
    def llm_enabled(self) -> bool:
        """Whether the LLM-backed insight provider can be used."""
        return bool(self.openai_api_key)

    def validate(self) -> None:
        """Validate settings values.

        Raises:
            ValueError: If a setting is out of range.
        """
        if self.insight_timeout_seconds <= 0:
            raise ValueError("INSIGHT_TIMEOUT_SECONDS must be positive")
        if self.insight_max_attempts < 1:
            raise ValueError("INSIGHT_MAX_ATTEMPTS must be at least 1")
        if self.estimate_validity_days < 1:
            raise ValueError("ESTIMATE_VALIDITY_DAYS must be at least 1")
        if self.default_square_footage <= 0:
            raise ValueError("DEFAULT_SQUARE_FOOTAGE must be positive")
        if self.comparable_store_backend not in ("memory", "firestore"):
            raise ValueError("COMPARABLE_STORE_BACKEND must be 'memory' or 'firestore'")


# Singleton settings instance
settings = Settings()
