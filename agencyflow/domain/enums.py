"""Domain enumerations for workflow automation.

Trigger types name the business events other subsystems emit, step types
name the actions a workflow can run, and the condition enums define the
rule language stored in a workflow's trigger_config.
"""

from enum import Enum


class TriggerType(str, Enum):
    """Business events a workflow can be triggered by. New events extend this list."""

    PROPOSAL_CREATED = "proposal_created"
    PROPOSAL_SENT = "proposal_sent"
    PROPOSAL_VIEWED = "proposal_viewed"
    PROPOSAL_ACCEPTED = "proposal_accepted"
    PROPOSAL_DECLINED = "proposal_declined"
    CONTRACT_CREATED = "contract_created"
    CONTRACT_SENT = "contract_sent"
    CONTRACT_SIGNED = "contract_signed"
    LEAD_CREATED = "lead_created"
    LEAD_STATUS_CHANGED = "lead_status_changed"
    CLIENT_CREATED = "client_created"
    CLIENT_STATUS_CHANGED = "client_status_changed"
    CONTACT_CREATED = "contact_created"
    TASK_CREATED = "task_created"
    TASK_COMPLETED = "task_completed"
    TASK_STATUS_CHANGED = "task_status_changed"
    PROJECT_STATUS_CHANGED = "project_status_changed"
    INVOICE_CREATED = "invoice_created"
    INVOICE_OVERDUE = "invoice_overdue"
    PAYMENT_RECEIVED = "payment_received"
    FORM_CREATED = "form_created"
    FORM_PUBLISHED = "form_published"
    FORM_SUBMITTED = "form_submitted"
    BOOKING_CREATED = "booking_created"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_RESCHEDULED = "booking_rescheduled"
    EVENT_REGISTRATION = "event_registration"
    EVENT_ENDED = "event_ended"
    SURVEY_RESPONSE_SUBMITTED = "survey_response_submitted"
    DELIVERABLE_APPROVED = "deliverable_approved"
    DELIVERABLE_REJECTED = "deliverable_rejected"
    PORTAL_FILE_UPLOADED = "portal_file_uploaded"
    PORTAL_CLIENT_LOGIN = "portal_client_login"
    VENDOR_CREATED = "vendor_created"
    VENDOR_STATUS_CHANGED = "vendor_status_changed"

    @classmethod
    def values(cls) -> list[str]:
        """Return all trigger type values as strings."""
        return [t.value for t in cls]


class StepType(str, Enum):
    """Kinds of action a workflow step can perform."""

    SEND_EMAIL = "send_email"
    SEND_NOTIFICATION = "send_notification"
    WEBHOOK = "webhook"
    WAIT_DELAY = "wait_delay"
    CONDITION = "condition"
    CREATE_TASK = "create_task"
    CREATE_PROJECT = "create_project"
    CREATE_EVENT = "create_event"
    UPDATE_STATUS = "update_status"
    UPDATE_FIELD = "update_field"
    ASSIGN_TO = "assign_to"
    ADD_TAG = "add_tag"
    APPROVAL = "approval"

    @classmethod
    def values(cls) -> list[str]:
        """Return all step type values as strings."""
        return [t.value for t in cls]


class ConditionOperator(str, Enum):
    """Comparison operators usable in trigger and condition-step rules."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    IN = "in"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"


class ConditionLogic(str, Enum):
    """How multiple conditions combine."""

    AND = "AND"
    OR = "OR"
