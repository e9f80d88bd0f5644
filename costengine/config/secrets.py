"""Secret access for the cost engine.

Secrets come from environment variables (optionally seeded from a .env
file by config.settings). Values are cached so repeated lookups are cheap.

Usage:
    from costengine.config.secrets import get_openai_api_key

    api_key = get_openai_api_key()
"""

import os
import logging
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)


def get_secret(secret_id: str) -> Optional[str]:
    """
    Get a secret from the environment.

    Args:
        secret_id: The name of the secret (e.g., 'OPENAI_API_KEY')

    Returns:
        The secret value, or None if not set
    """
    value = os.environ.get(secret_id)
    if value:
        logger.debug(f"Secret {secret_id} loaded from environment")
    else:
        logger.info(f"Secret {secret_id} not found in environment variables")
    return value or None


@lru_cache(maxsize=1)
def get_openai_api_key() -> Optional[str]:
    """Get OpenAI API key used by the LLM insight provider."""
    return get_secret('OPENAI_API_KEY')


def clear_secret_cache() -> None:
    """Clear cached secrets. Useful for testing or when secrets are rotated."""
    get_openai_api_key.cache_clear()
