"""Domain-specific exceptions for service layer operations.

Every registry operation fails fast with one of a small set of stable error
kinds. Each kind carries its HTTP status so the API layer can render it
without knowing about individual operations.

Architecture:
- ServiceError: Base exception with correlation ID and context support
- Kinds: ValidationError, AuthenticationError, ForbiddenError,
  NotFoundError, ConflictError, StorageError
- Specific Exceptions: per-entity not-found errors, invalid transitions,
  upload constraint violations
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union
from http import HTTPStatus


class ErrorSeverity(Enum):
    """Error severity levels for logging and monitoring."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"
    SYSTEM = "system"


class ServiceError(Exception):
    """Base exception for all service layer errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for client handling
        correlation_id: Request correlation ID for tracing
        details: Additional error context (sanitized for logging)
        user_message: User-friendly message for client display
        severity: Error severity level for logging/monitoring
        category: Error category for classification
        http_status: HTTP status code for API responses
    """

    def __init__(
        self,
        message: str,
        error_code: str = "SERVICE_ERROR",
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        http_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.correlation_id = correlation_id
        self.details = details or {}
        self.user_message = user_message or message
        self.severity = severity
        self.category = category
        self.http_status = http_status

    def to_dict(self, include_sensitive: bool = False) -> Dict[str, Any]:
        """Convert exception to dictionary for logging or client response.

        Args:
            include_sensitive: Whether to include sensitive details

        Returns:
            Dictionary representation of the error
        """
        result = {
            "error_code": self.error_code,
            "message": self.user_message,
            "severity": self.severity.value,
            "category": self.category.value,
            "http_status": self.http_status.value
        }

        if self.correlation_id:
            result["correlation_id"] = self.correlation_id

        if include_sensitive and self.details:
            result["details"] = self.details
            result["internal_message"] = self.message

        return result

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


# =============================================================================
# AUTHENTICATION & AUTHORIZATION ERRORS
# =============================================================================

class AuthenticationError(ServiceError):
    """The credential is missing, expired or cannot be verified."""

    def __init__(
        self,
        message: str = "Authentication failed",
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="AUTH_FAILED",
            correlation_id=correlation_id,
            details=details,
            user_message="Authentication failed. Please sign in again.",
            category=ErrorCategory.AUTHENTICATION,
            http_status=HTTPStatus.UNAUTHORIZED
        )


class ForbiddenError(ServiceError):
    """Actor is authenticated but lacks the role or ownership for the operation."""

    def __init__(
        self,
        action: str,
        resource_type: str,
        resource_id: Optional[Union[int, str]] = None,
        actor_id: Optional[int] = None,
        role: Optional[str] = None,
        correlation_id: Optional[str] = None
    ):
        details: Dict[str, Any] = {"action": action, "resource_type": resource_type}
        if resource_id is not None:
            details["resource_id"] = resource_id
        if actor_id is not None:
            details["actor_id"] = actor_id
        if role is not None:
            details["role"] = role

        target = f"{resource_type} {resource_id}" if resource_id is not None else resource_type
        super().__init__(
            message=f"Not allowed to {action} {target}",
            error_code="FORBIDDEN",
            correlation_id=correlation_id,
            details=details,
            user_message=f"You are not allowed to {action} this {resource_type.lower()}.",
            category=ErrorCategory.AUTHORIZATION,
            http_status=HTTPStatus.FORBIDDEN
        )


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class ValidationError(ServiceError):
    """Input validation failed."""

    def __init__(
        self,
        field: str,
        message: str,
        correlation_id: Optional[str] = None,
        validation_errors: Optional[List[Dict[str, str]]] = None
    ):
        details = {"field": field, "validation_message": message}
        if validation_errors:
            details["validation_errors"] = validation_errors

        super().__init__(
            message=f"Validation failed for {field}: {message}",
            error_code="VALIDATION_ERROR",
            correlation_id=correlation_id,
            details=details,
            user_message=f"Invalid {field}: {message}",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            http_status=HTTPStatus.BAD_REQUEST
        )


class InvalidFileTypeError(ValidationError):
    """Uploaded file is not an accepted image."""

    def __init__(
        self,
        filename: str,
        file_type: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            field="photos",
            message=f"'{filename}' is not an image (got {file_type})",
            correlation_id=correlation_id
        )
        self.error_code = "INVALID_FILE_TYPE"


class FileSizeLimitError(ValidationError):
    """File size exceeds limit."""

    def __init__(
        self,
        filename: str,
        file_size: int,
        max_size: int,
        correlation_id: Optional[str] = None
    ):
        max_size_mb = max_size / (1024 * 1024)
        super().__init__(
            field="photos",
            message=f"'{filename}' exceeds the maximum allowed size of {max_size_mb:.1f}MB",
            correlation_id=correlation_id
        )
        self.error_code = "FILE_SIZE_LIMIT_EXCEEDED"
        self.details.update({"file_size": file_size, "max_size": max_size})


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================

class NotFoundError(ServiceError):
    """Referenced record does not exist."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Union[int, str],
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"{resource_type} {resource_id} not found",
            error_code=f"{resource_type.upper()}_NOT_FOUND",
            correlation_id=correlation_id,
            details={"resource_type": resource_type, "resource_id": resource_id},
            user_message=f"{resource_type} not found.",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.RESOURCE_NOT_FOUND,
            http_status=HTTPStatus.NOT_FOUND
        )


class JobNotFoundError(NotFoundError):
    def __init__(self, job_id: int, correlation_id: Optional[str] = None):
        super().__init__(resource_type="Job", resource_id=job_id, correlation_id=correlation_id)


class InvoiceNotFoundError(NotFoundError):
    def __init__(self, invoice_id: int, correlation_id: Optional[str] = None):
        super().__init__(resource_type="Invoice", resource_id=invoice_id, correlation_id=correlation_id)


class ReportNotFoundError(NotFoundError):
    def __init__(self, report_id: int, correlation_id: Optional[str] = None):
        super().__init__(resource_type="Report", resource_id=report_id, correlation_id=correlation_id)


class PhotoNotFoundError(NotFoundError):
    def __init__(self, photo_id: int, correlation_id: Optional[str] = None):
        super().__init__(resource_type="Photo", resource_id=photo_id, correlation_id=correlation_id)


# =============================================================================
# CONFLICT ERRORS
# =============================================================================

class ConflictError(ServiceError):
    """Operation is not permitted by the record's current state."""

    def __init__(
        self,
        message: str,
        error_code: str = "CONFLICT",
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
            details=details,
            user_message=user_message,
            category=ErrorCategory.CONFLICT,
            http_status=HTTPStatus.CONFLICT
        )


class InvalidTransitionError(ConflictError):
    """Status change not present in the transition table."""

    def __init__(
        self,
        entity: str,
        entity_id: Optional[int],
        from_status: str,
        to_status: str,
        role: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"{entity} {entity_id}: {role} cannot move status {from_status} -> {to_status}",
            error_code="INVALID_STATUS_TRANSITION",
            correlation_id=correlation_id,
            details={
                "entity": entity,
                "entity_id": entity_id,
                "from_status": from_status,
                "to_status": to_status,
                "role": role,
            },
            user_message=f"{entity} cannot change status from {from_status} to {to_status}."
        )


# =============================================================================
# STORAGE ERRORS
# =============================================================================

class StorageError(ServiceError):
    """Durable write or file write failed."""

    def __init__(
        self,
        operation: str,
        reason: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"Storage {operation} failed: {reason}",
            error_code="STORAGE_ERROR",
            correlation_id=correlation_id,
            details={"operation": operation, "reason": reason},
            user_message="A system error occurred. Please try again later.",
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.INFRASTRUCTURE,
            http_status=HTTPStatus.INTERNAL_SERVER_ERROR
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def create_error_response(
    error: ServiceError,
    include_details: bool = False
) -> Dict[str, Any]:
    """Create standardized error response dictionary.

    Args:
        error: ServiceError instance
        include_details: Whether to include sensitive details

    Returns:
        Standardized error response dictionary
    """
    return error.to_dict(include_sensitive=include_details)
