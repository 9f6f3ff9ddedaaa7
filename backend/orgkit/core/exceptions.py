"""
Custom exception hierarchy for structured error handling.

Every guard failure in the kit is raised as a subclass of AppException so
callers can tell them apart by type, while persistence errors from SQLAlchemy
propagate unchanged.

IMPORTANT: NEVER raise the base Exception class. Always use custom exceptions.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception class for all kit exceptions.

    The status_code mirrors the HTTP status a web layer would map the error
    to; the kit itself has no HTTP surface.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: Status code (overrides class default)
            **context: Additional context for debugging (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to a dictionary.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        sensitive_fields = {"password", "token", "secret", "key", "api_key", "private_key"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input data fails validation.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when a requested resource doesn't exist.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class OrganizationNotFoundError(ResourceNotFoundError):
    """Raised when an organization id (or a user's personal organization) is unknown."""

    default_message = "Organization not found"


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a user id is unknown."""

    default_message = "User not found"


class ResourceAlreadyExistsError(AppException):
    """
    Raised when attempting to create a resource that already exists.

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Resource already exists"


class DuplicatePersonalOrganizationError(ResourceAlreadyExistsError):
    """
    Raised when a creator already owns a personal organization.

    Raised both by the pre-insert check and when the partial unique index
    on organizations rejects the insert.
    """

    default_message = "Personal organization already exists"


class MembershipAlreadyExistsError(ResourceAlreadyExistsError):
    """Raised when a user is already a member of the organization."""

    default_message = "User is already a member of this organization"


class UserAlreadyExistsError(ResourceAlreadyExistsError):
    """Raised when a user id or email is already registered."""

    default_message = "User already exists"


# ============================================================================
# Business Logic Exceptions
# ============================================================================


class BusinessRuleViolation(AppException):
    """
    Raised when an operation violates business rules.

    HTTP Status: 422 Unprocessable Entity
    """

    status_code = 422
    default_message = "Business rule violation"


class OrganizationLimitExceededError(BusinessRuleViolation):
    """Raised when a creator already owns the maximum number of organizations."""

    default_message = "You have reached the maximum number of created organizations"


class OrganizationSuspendedError(BusinessRuleViolation):
    """
    Raised when an action needs an active organization but it is suspended.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "Organization is suspended"

    def __init__(self, reason: Optional[str] = None, **context: Any):
        self.reason = reason
        message = f"Organization is suspended: {reason}" if reason else None
        super().__init__(message=message, reason=reason, **context)


class CannotDeletePersonalOrganizationError(BusinessRuleViolation):
    """Raised when deleting a personal organization without the force override."""

    status_code = 403
    default_message = "Cannot delete personal organization"


# ============================================================================
# Database Exceptions
# ============================================================================


class DatabaseError(AppException):
    """
    Raised for failures of the database handle itself (not query errors).

    HTTP Status: 500 Internal Server Error
    """

    status_code = 500
    default_message = "Database error"


class DatabaseConnectionError(DatabaseError):
    """
    Raised when the database cannot be reached.

    HTTP Status: 503 Service Unavailable
    """

    status_code = 503
    default_message = "Database connection failed"
