"""
Exception hierarchy for the leadership assessment service.

Every error carries a technical ``message`` for the logs and a
``user_message`` that is safe to show to the person taking the assessment.
The web layer maps the classes below onto HTTP status codes:

- ``ValidationError`` / ``MultipleValidationError``: 422
- ``NotFoundError``: 404
- ``PersistenceError``: 503
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import DBAPIError, InterfaceError
from sqlalchemy.exc import IntegrityError as SQLIntegrityError

GENERIC_USER_MESSAGE = "An unexpected error occurred. Please try again."
CONNECTION_MARKERS = ("could not connect", "connection refused", "timeout", "timed out")


class LeadershipAssessmentError(Exception):
    """Base class for errors raised by this package."""

    default_user_message = GENERIC_USER_MESSAGE

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.user_message = user_message or self.default_user_message

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class ValidationError(LeadershipAssessmentError):
    """An answer, score or request field is out of range or malformed."""

    def __init__(
        self, field: str, message: str, value: Any = None, details: dict[str, Any] | None = None
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=f"Validation failed for field '{field}': {message}",
            details=details or {"field": field, "value": value},
            user_message=f"Invalid {field.replace('_', ' ')}: {message}",
        )
        # Keep the short form for aggregation
        self.reason = message


class MultipleValidationError(LeadershipAssessmentError):
    default_user_message = "Please correct the following errors and try again."

    def __init__(self, errors: list[ValidationError]):
        self.validation_errors = list(errors)
        summary = "; ".join(f"{e.field}: {e.reason}" for e in self.validation_errors)
        super().__init__(
            message=f"Multiple validation errors: {summary}",
            details={
                "errors": [
                    {"field": e.field, "message": e.reason, "value": e.value}
                    for e in self.validation_errors
                ]
            },
        )


class IncompleteAnswersError(ValidationError):
    """A page or the whole questionnaire was submitted with unanswered questions."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            "answers",
            f"missing answers for {', '.join(self.missing)}",
            details={"field": "answers", "missing": self.missing},
        )
        self.user_message = "Please answer all questions before continuing."


class PersistenceError(LeadershipAssessmentError):
    """A backing store (database or CSV file) was unreachable or refused a write."""

    default_user_message = (
        "Your results were scored but could not be saved. Please try again later."
    )

    def __init__(
        self,
        message: str,
        operation: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        self.operation = operation
        super().__init__(
            message=message,
            details=details or {"operation": operation},
            user_message=user_message,
        )


class DatabaseError(PersistenceError):
    default_user_message = "A database error occurred. Please try again in a moment."

    def __init__(self, message: str, operation: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Database error during {operation}: {message}",
            operation=operation,
            details=details,
        )


class DatabaseUnavailableError(DatabaseError):
    default_user_message = (
        "The results database is not reachable right now. Please try again later."
    )

    def __init__(self, message: str, operation: str = "connection"):
        super().__init__(message, operation)


class IntegrityError(DatabaseError):
    """A unique, foreign key or check constraint rejected the write."""

    CONSTRAINT_MESSAGES = {
        "unique": "This record already exists (unique constraint).",
        "foreign_key": "A referenced record no longer exists (foreign key constraint).",
        "check": "A stored value is out of range (check constraint).",
    }

    def __init__(
        self, message: str, constraint: str | None = None, operation: str = "integrity_check"
    ):
        self.constraint = constraint
        super().__init__(message, operation, details={"constraint": constraint})
        self.user_message = self.CONSTRAINT_MESSAGES.get(
            constraint or "", "Data integrity error (constraint violated). Please check your input."
        )


class CsvWriteError(PersistenceError):
    """The CSV results file could not be created, read or appended to."""

    def __init__(self, message: str, path: str, details: dict[str, Any] | None = None):
        self.path = path
        super().__init__(
            message=message,
            operation="csv_append",
            details=details or {"path": path},
            user_message="Unable to write the results file. Please try again later.",
        )


class NotFoundError(LeadershipAssessmentError):
    """A lookup by id found nothing."""

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=f"{resource} with ID {identifier} not found",
            details={"resource": resource, "id": identifier},
            user_message=f"The requested {resource.lower()} could not be found.",
        )


class AssessmentNotFoundError(NotFoundError):
    def __init__(self, assessment_id: int):
        self.assessment_id = assessment_id
        super().__init__("Assessment", assessment_id)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("User", user_id)


def _constraint_kind(text: str) -> str | None:
    if "unique" in text or "duplicate" in text:
        return "unique"
    if "foreign key" in text or "foreign_key" in text:
        return "foreign_key"
    if "check constraint" in text:
        return "check"
    return None


def handle_database_error(e: Exception, operation: str = "database operation") -> DatabaseError:
    """
    Translate a driver or SQLAlchemy exception into a ``DatabaseError``.

    Example:
        >>> try:
        ...     session.commit()
        ... except SQLAlchemyError as e:
        ...     raise handle_database_error(e, "assessment.create")
    """
    text = str(e).lower()

    if isinstance(e, SQLIntegrityError):
        return IntegrityError(str(e), constraint=_constraint_kind(text), operation=operation)

    lost_connection = any(marker in text for marker in CONNECTION_MARKERS)
    if isinstance(e, InterfaceError) or (isinstance(e, DBAPIError) and lost_connection):
        return DatabaseUnavailableError(str(e), operation)
    if getattr(e, "connection_invalidated", False):
        return DatabaseUnavailableError(str(e), operation)

    kind = _constraint_kind(text)
    if kind is not None:
        return IntegrityError(str(e), constraint=kind, operation=operation)
    return DatabaseError(str(e), operation)


def create_user_friendly_error_message(error: Exception) -> str:
    """
    Message safe to show for any exception.

    Example:
        >>> error = ValidationError("answers", "value must be between 1 and 5")
        >>> create_user_friendly_error_message(error)
        'Invalid answers: value must be between 1 and 5'
    """
    if isinstance(error, LeadershipAssessmentError):
        return error.user_message

    builtin_messages = {
        ValueError: "Invalid input provided. Please check your data and try again.",
        KeyError: "Required information is missing. Please check your input.",
        TypeError: "Incorrect data type provided. Please check your input format.",
    }
    for error_type, message in builtin_messages.items():
        if isinstance(error, error_type):
            return message
    return "An unexpected error occurred. Please try again or contact support."


def log_error_details(error: Exception, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Structured fields for ``logger.error(..., extra=...)``.

    Example:
        >>> log_error_details(DatabaseError("locked", "assessment.create"))["error_type"]
        'DatabaseError'
    """
    details: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }
    if isinstance(error, LeadershipAssessmentError):
        details["user_message"] = error.user_message
        details["error_details"] = error.details
    return details
