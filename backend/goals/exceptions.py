"""
Service Exceptions

Domain exception hierarchy shared by the tracking and migration services.

Expected-empty outcomes are NOT exceptions: an empty session batch yields no
DailyStatus, a day without an applicable snapshot resolves to an unknown goal
(None) and a topic without history has a zero streak. The classes below cover
invalid input, unknown identifiers and migration failures.

Usage:
    from goals.exceptions import TopicNotFoundError

    raise TopicNotFoundError(f"Topic {topic_id} not found", details={"topic_id": str(topic_id)})
"""

from typing import Optional


class ServiceError(Exception):
    """
    Base exception for service errors.

    Provides consistent error handling with:
    - Error code for categorization
    - Optional details for debugging

    Example:
        raise ServiceError("Database connection failed", error_code="db_unavailable")
    """

    error_code: str = "service_error"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details


class ValidationError(ServiceError):
    """
    Data validation error.

    Raised when input data fails validation.
    """

    error_code = "validation_error"


class InvalidGoalError(ValidationError):
    """Goal values must be positive whole minutes."""

    error_code = "invalid_goal"


class InvalidSessionError(ValidationError):
    """Session intervals must not end before they start."""

    error_code = "invalid_session"


class MixedDayBatchError(ValidationError):
    """
    Daily aggregation received sessions from more than one day.

    Only raised when STRICT_DAY_CHECKS is enabled; by default the caller
    is trusted to pass a single-day batch.
    """

    error_code = "mixed_day_batch"


class NotFoundError(ServiceError):
    """
    Resource not found error.

    Raised when a requested resource doesn't exist.
    """

    error_code = "not_found"


class TopicNotFoundError(NotFoundError):
    error_code = "topic_not_found"


class SessionNotFoundError(NotFoundError):
    error_code = "session_not_found"


class MigrationError(ServiceError):
    """
    Legacy migration error.

    Raised when the legacy store cannot be read or is not in the legacy shape.
    Per-topic inconsistencies are logged and skipped instead.
    """

    error_code = "migration_error"
