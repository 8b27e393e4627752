"""Domain exceptions for the workflow automation service.

These represent business rule violations and are independent of
infrastructure. The presentation layer maps them to HTTP responses in
agencyflow.core.exception_handlers using error_code.
"""

from typing import Any


class AgencyFlowException(Exception):
    """Base exception for all agencyflow errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the API."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(AgencyFlowException):
    """Raised when input or stored configuration fails validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(AgencyFlowException):
    """Raised when a bearer token or shared secret is missing or invalid."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(AgencyFlowException):
    """Raised when the caller may not perform the operation (incl. feature gating)."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        if resource and action and message == "Permission denied":
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(AgencyFlowException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class WorkflowNotFoundException(ResourceNotFoundException):
    """Raised when a workflow does not exist in the caller's tenant.

    A workflow owned by another tenant produces the same error, so callers
    cannot probe for foreign ids.
    """

    def __init__(self, workflow_id: str) -> None:
        super().__init__("workflow", workflow_id)


class SqlNotConfiguredException(AgencyFlowException):
    """Raised when the database engine could not be configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
