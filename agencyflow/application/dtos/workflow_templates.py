"""Built-in workflow templates: ready-made trigger and step bundles.

A template is installed as a normal workflow through
WorkflowDefinitionService.install_template, so it passes the same
save-time validation as a hand-built one. Step configs use the same
{{ variable }} placeholders as user workflows; `variables` lists the
trigger data keys a template expects.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TemplateCategory = Literal["clients", "contacts", "events", "tasks", "projects", "invoices"]


class TemplateStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_type: str
    config: dict[str, Any] = Field(default_factory=dict)
    continue_on_error: bool = False


class WorkflowTemplate(BaseModel):
    """A catalog entry. Installing it creates one workflow with these steps in order."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: TemplateCategory
    icon: str
    popular: bool = False
    trigger_type: str
    trigger_config: dict[str, Any] = Field(default_factory=dict)
    steps: tuple[TemplateStep, ...]
    variables: tuple[str, ...] = ()


def _notify(title: str, message: str, action_url: str | None = None) -> TemplateStep:
    config: dict[str, Any] = {"title": title, "message": message}
    if action_url:
        config["action_url"] = action_url
    return TemplateStep(step_type="send_notification", config=config)


def _email(to: str, subject: str, body: str) -> TemplateStep:
    return TemplateStep(
        step_type="send_email", config={"to": to, "subject": subject, "body": body}
    )


def _only_if(field: str, value: Any) -> TemplateStep:
    return TemplateStep(
        step_type="condition",
        config={"conditions": [{"field": field, "operator": "equals", "value": value}]},
    )


WORKFLOW_TEMPLATES: tuple[WorkflowTemplate, ...] = (
    # Clients
    WorkflowTemplate(
        id="welcome-new-client",
        name="Welcome New Client",
        description="Send a personalized welcome email when a new client is added",
        category="clients",
        icon="user-plus",
        popular=True,
        trigger_type="client_created",
        steps=(
            _email(
                "{{ email }}",
                "Welcome to {{ company }}!",
                "Hi {{ name }},\n\n"
                "Welcome! We're excited to have you on board.\n\n"
                "Our team is here to help you succeed. If you have any questions, "
                "don't hesitate to reach out.\n\n"
                "Best regards,\nThe Team",
            ),
        ),
        variables=("name", "email", "company"),
    ),
    WorkflowTemplate(
        id="client-onboarding-checklist",
        name="Client Onboarding Checklist",
        description="Remind the team of the onboarding checklist when a new client is added",
        category="clients",
        icon="clipboard-list",
        popular=True,
        trigger_type="client_created",
        steps=(
            _notify(
                "Onboard {{ name }}",
                "Schedule a kickoff call, send the welcome package and set up "
                "client portal access for {{ name }}.",
                "/dashboard/clients",
            ),
        ),
        variables=("name", "email", "company"),
    ),
    WorkflowTemplate(
        id="client-status-changed-notification",
        name="Client Status Changed",
        description="Notify the team when a client's status changes",
        category="clients",
        icon="user-check",
        trigger_type="client_status_changed",
        steps=(
            _notify(
                "Client {{ name }} is now {{ to_status }}",
                "{{ name }} moved from {{ from_status }} to {{ to_status }}.",
                "/dashboard/clients",
            ),
        ),
        variables=("name", "from_status", "to_status"),
    ),
    # Contacts
    WorkflowTemplate(
        id="welcome-new-contact",
        name="Welcome New Contact",
        description="Send a welcome email when a new contact is added",
        category="contacts",
        icon="mail",
        popular=True,
        trigger_type="contact_created",
        steps=(
            _email(
                "{{ email }}",
                "Nice to meet you, {{ first_name }}!",
                "Hi {{ first_name }},\n\n"
                "Thank you for connecting with us! We're looking forward to working "
                "with you.\n\n"
                "If there's anything you need, please don't hesitate to reach out.\n\n"
                "Best regards",
            ),
        ),
        variables=("first_name", "last_name", "name", "email", "company"),
    ),
    WorkflowTemplate(
        id="contact-follow-up-reminder",
        name="Contact Follow-up Reminder",
        description="Remind the creator to follow up with a new contact",
        category="contacts",
        icon="phone",
        trigger_type="contact_created",
        steps=(
            _notify(
                "Follow up with {{ name }}",
                "Reach out to {{ name }} at {{ company }} to discuss their needs. "
                "Email: {{ email }} Phone: {{ phone }}",
                "/dashboard/contacts",
            ),
        ),
        variables=("name", "email", "phone", "company"),
    ),
    # Events
    WorkflowTemplate(
        id="event-registration-notification",
        name="New Event Registration",
        description="Notify the team when someone registers for an event",
        category="events",
        icon="calendar-plus",
        trigger_type="event_registration",
        steps=(
            _notify(
                "New registration: {{ title }}",
                "{{ name }} registered for '{{ title }}'.",
                "/dashboard/events",
            ),
        ),
        variables=("title", "name", "email"),
    ),
    WorkflowTemplate(
        id="event-follow-up",
        name="Event Wrap-up",
        description="Remind the team to send follow-ups when an event ends",
        category="events",
        icon="clipboard-check",
        popular=True,
        trigger_type="event_ended",
        steps=(
            _notify(
                "'{{ title }}' has ended",
                "Send thank-you notes and the post-event survey to attendees of '{{ title }}'.",
                "/dashboard/events",
            ),
        ),
        variables=("title", "name"),
    ),
    # Tasks
    WorkflowTemplate(
        id="task-completed-notification",
        name="Task Completed Notification",
        description="Notify the team when a task is marked as completed",
        category="tasks",
        icon="check-circle",
        trigger_type="task_status_changed",
        trigger_config={
            "conditions": [{"field": "to_status", "operator": "equals", "value": "completed"}]
        },
        steps=(
            _notify(
                "Task Completed: {{ title }}",
                "The task '{{ title }}' has been marked as completed.",
                "/dashboard/tasks",
            ),
        ),
        variables=("title", "from_status", "to_status"),
    ),
    WorkflowTemplate(
        id="task-high-priority-alert",
        name="High Priority Task Alert",
        description="Send an alert when a high priority task is created",
        category="tasks",
        icon="alert-triangle",
        trigger_type="task_created",
        steps=(
            _only_if("priority", "high"),
            _notify(
                "High Priority Task Created",
                "A new high priority task '{{ title }}' requires attention.",
                "/dashboard/tasks",
            ),
        ),
        variables=("title", "priority", "assigned_to"),
    ),
    # Projects
    WorkflowTemplate(
        id="project-status-notification",
        name="Project Status Update",
        description="Notify the team when a project changes status",
        category="projects",
        icon="folder-plus",
        popular=True,
        trigger_type="project_status_changed",
        steps=(
            _notify(
                "Project {{ name }} is now {{ to_status }}",
                "Project '{{ name }}' moved from {{ from_status }} to {{ to_status }}.",
                "/dashboard/projects",
            ),
        ),
        variables=("name", "from_status", "to_status"),
    ),
    # Invoices
    WorkflowTemplate(
        id="invoice-payment-reminder",
        name="Payment Reminder",
        description="Alert the team to chase payment when an invoice becomes overdue",
        category="invoices",
        icon="alert-circle",
        popular=True,
        trigger_type="invoice_overdue",
        steps=(
            _notify(
                "Invoice #{{ invoice_number }} is overdue",
                "Invoice #{{ invoice_number }} for {{ invoice_amount }} {{ currency }} "
                "({{ client_name }}) is {{ days_overdue }} days past due. "
                "Send the client a payment reminder.",
                "/dashboard/invoices",
            ),
        ),
        variables=("client_name", "invoice_number", "invoice_amount", "currency", "days_overdue"),
    ),
    WorkflowTemplate(
        id="payment-received-thank-you",
        name="Payment Received Thank You",
        description="Send a thank-you email and notify the team when a payment is received",
        category="invoices",
        icon="check-square",
        trigger_type="payment_received",
        steps=(
            _email(
                "{{ email }}",
                "Thank You - Payment Received",
                "Dear {{ name }},\n\n"
                "Thank you for your payment! We've received your payment for invoice "
                "#{{ invoice_number }}.\n\n"
                "We appreciate your business and look forward to continuing to work "
                "with you.\n\nBest regards",
            ),
            _notify(
                "Payment Received",
                "Invoice #{{ invoice_number }} has been paid by {{ name }}.",
                "/dashboard/invoices",
            ),
        ),
        variables=("name", "email", "invoice_number", "amount"),
    ),
)

_BY_ID = {t.id: t for t in WORKFLOW_TEMPLATES}


def get_template(template_id: str) -> WorkflowTemplate | None:
    return _BY_ID.get(template_id)


def list_templates(
    category: str | None = None, popular: bool | None = None
) -> list[WorkflowTemplate]:
    return [
        t
        for t in WORKFLOW_TEMPLATES
        if (category is None or t.category == category)
        and (popular is None or t.popular == popular)
    ]
