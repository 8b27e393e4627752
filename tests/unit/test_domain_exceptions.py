"""Tests for domain exceptions (error_code, message, details, to_dict)."""

from agencyflow.domain.exceptions import (
    AgencyFlowException,
    AuthenticationException,
    AuthorizationException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
    WorkflowNotFoundException,
)


def test_base_exception_default_error_code() -> None:
    """Base exception uses the class name as error_code when not provided."""
    exc = AgencyFlowException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "AgencyFlowException"
    assert exc.details == {}
    assert exc.to_dict() == {"error": "AgencyFlowException", "message": "Something failed"}


def test_validation_exception_with_field() -> None:
    """ValidationException sets VALIDATION_ERROR and the field in details."""
    exc = ValidationException("Unknown trigger type: nope", field="trigger_type")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.to_dict()["details"] == {"field": "trigger_type"}


def test_authentication_exception() -> None:
    exc = AuthenticationException()
    assert exc.error_code == "AUTHENTICATION_ERROR"
    assert exc.message == "Authentication failed"


def test_authorization_exception_builds_message() -> None:
    """AuthorizationException derives its message from resource and action."""
    exc = AuthorizationException(resource="workflow", action="create")
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.message == "Permission denied: create on workflow"
    assert exc.details == {"resource": "workflow", "action": "create"}


def test_workflow_not_found_is_resource_not_found() -> None:
    """Missing and foreign-tenant workflows share the not-found shape."""
    exc = WorkflowNotFoundException("wf1")
    assert isinstance(exc, ResourceNotFoundException)
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "workflow", "resource_id": "wf1"}


def test_sql_not_configured_is_service_unavailable() -> None:
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"
