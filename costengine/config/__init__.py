"""Cost engine configuration.

This package contains:
- settings: Environment variables and configuration
- secrets: Secret access (OPENAI_API_KEY)
- errors: Custom exceptions and error codes
"""

from costengine.config.settings import settings, Settings
from costengine.config.errors import (
    ComparableStoreError,
    CostEngineError,
    ErrorCode,
    EstimateStateError,
    InsightError,
    ProjectValidationError,
)
from costengine.config.secrets import get_secret, get_openai_api_key

__all__ = [
    "settings",
    "Settings",
    "ComparableStoreError",
    "CostEngineError",
    "ErrorCode",
    "EstimateStateError",
    "InsightError",
    "ProjectValidationError",
    "get_secret",
    "get_openai_api_key",
]
