"""Cost engine error handling.

Custom exceptions and error codes for the estimation pipeline.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_RATE_TABLES = "INVALID_RATE_TABLES"

    # Requirement insight errors
    INSIGHT_FAILED = "INSIGHT_FAILED"
    INSIGHT_TIMEOUT = "INSIGHT_TIMEOUT"
    INSIGHT_INVALID_RESPONSE = "INSIGHT_INVALID_RESPONSE"

    # Historical store errors
    COMPARABLE_STORE_ERROR = "COMPARABLE_STORE_ERROR"

    # Estimate lifecycle errors
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"


class CostEngineError(Exception):
    """Base exception for cost engine errors.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response.

        Returns:
            Dictionary with code, message, and details.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"CostEngineError(code={self.code!r}, message={self.message!r})"


class InsightError(CostEngineError):
    """Requirement insight provider error."""

    def __init__(
        self,
        code: str,
        message: str,
        provider: str,
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "provider": provider}
        )
        self.provider = provider


class ComparableStoreError(CostEngineError):
    """Historical comparable store error."""

    def __init__(self, message: str, category: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.COMPARABLE_STORE_ERROR,
            message=message,
            details={**(details or {}), "category": category}
        )
        self.category = category


class EstimateStateError(CostEngineError):
    """Illegal estimate status transition."""

    def __init__(self, estimate_id: str, current: str, requested: str):
        super().__init__(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot move estimate {estimate_id} from {current} to {requested}",
            details={"estimate_id": estimate_id, "current": current, "requested": requested}
        )
        self.estimate_id = estimate_id
        self.current = current
        self.requested = requested


class ProjectValidationError(CostEngineError):
    """Project payload rejected before reaching the pipeline."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field
