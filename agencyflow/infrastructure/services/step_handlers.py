"""Built-in step handlers: condition, wait_delay, webhook, send_email, send_notification.

Each handler receives the step's stored (already validated) config and the
run's StepContext. Expected failures come back as StepResult.failed; any
exception a handler raises is turned into a failed step by the executor.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from agencyflow.application.dtos.step import WORKFLOW_DEPTH_KEY, StepContext, StepResult
from agencyflow.application.dtos.workflow_config import (
    ConditionStepConfig,
    SendEmailStepConfig,
    SendNotificationStepConfig,
    WaitDelayStepConfig,
    WebhookStepConfig,
)
from agencyflow.application.interfaces.services import INotificationService
from agencyflow.application.services.condition_evaluator import evaluate_conditions
from agencyflow.application.services.step_registry import StepHandlerRegistry
from agencyflow.domain.enums import StepType
from agencyflow.infrastructure.services.notification_service import (
    LogOnlyNotificationService,
)
from agencyflow.infrastructure.services.workflow_template_renderer import (
    WorkflowTemplateRenderer,
    template_context,
)
from agencyflow.shared.enums import SYSTEM_USER_ID
from agencyflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 10.0
DEFAULT_WAIT_DELAY_MAX_SECONDS = 300.0


def _split_recipients(value: str) -> list[str]:
    return [part.strip() for part in value.replace(";", ",").split(",") if part.strip()]


class BuiltinStepHandlers:
    """Holds the collaborators the built-in handlers share (HTTP client, notifier, renderer)."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        notification_service: INotificationService | None = None,
        renderer: WorkflowTemplateRenderer | None = None,
        webhook_timeout_seconds: float = DEFAULT_WEBHOOK_TIMEOUT_SECONDS,
        wait_delay_max_seconds: float = DEFAULT_WAIT_DELAY_MAX_SECONDS,
    ) -> None:
        self._http_client = http_client
        self._notifications = notification_service or LogOnlyNotificationService()
        self._renderer = renderer or WorkflowTemplateRenderer()
        self._webhook_timeout = webhook_timeout_seconds
        self._wait_max = wait_delay_max_seconds

    async def condition(self, config: dict[str, Any], context: StepContext) -> StepResult:
        cfg = ConditionStepConfig.model_validate(config)
        met = evaluate_conditions(cfg.conditions, cfg.logic, context.data)
        if not met and cfg.halt_on_false:
            return StepResult.ok({"condition_met": False}, halt=True)
        return StepResult.ok({"condition_met": met})

    async def wait_delay(self, config: dict[str, Any], context: StepContext) -> StepResult:
        cfg = WaitDelayStepConfig.model_validate(config)
        seconds = min(cfg.seconds, self._wait_max)
        if seconds < cfg.seconds:
            logger.warning(
                "wait_delay of %ss capped to %ss (workflow_id=%s, run_id=%s)",
                cfg.seconds,
                seconds,
                context.workflow_id,
                context.run_id,
            )
        await asyncio.sleep(seconds)
        return StepResult.ok({"waited_seconds": seconds})

    async def webhook(self, config: dict[str, Any], context: StepContext) -> StepResult:
        cfg = WebhookStepConfig.model_validate(config)
        variables = template_context(context)
        url = self._renderer.render(cfg.url, variables)
        if not url.startswith(("http://", "https://")):
            return StepResult.failed(f"Webhook URL must be http(s): {url!r}")
        headers = {"Content-Type": "application/json"}
        if cfg.auth_header:
            headers["Authorization"] = self._renderer.render(cfg.auth_header, variables)
        body = {
            "workflow_id": context.workflow_id,
            "run_id": context.run_id,
            "trigger_data": {
                k: v for k, v in context.data.items() if k != WORKFLOW_DEPTH_KEY
            },
            "custom_data": self._renderer.render_value(cfg.payload, variables),
        }
        try:
            response = await self._send(cfg.method, url, headers, body)
        except httpx.HTTPError as e:
            return StepResult.failed(f"Webhook request failed: {type(e).__name__}: {e}")

        output = {"webhook_status": response.status_code, "webhook_ok": response.is_success}
        if not response.is_success:
            return StepResult.failed(
                f"Webhook returned HTTP {response.status_code}", output=output
            )
        return StepResult.ok(output)

    async def _send(
        self, method: str, url: str, headers: dict[str, str], body: dict[str, Any]
    ) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.request(
                method, url, headers=headers, json=body, timeout=self._webhook_timeout
            )
        async with httpx.AsyncClient(timeout=self._webhook_timeout) as client:
            return await client.request(method, url, headers=headers, json=body)

    async def send_email(self, config: dict[str, Any], context: StepContext) -> StepResult:
        cfg = SendEmailStepConfig.model_validate(config)
        variables = template_context(context)
        recipients = _split_recipients(self._renderer.render(cfg.to, variables))
        if not recipients:
            return StepResult.failed("No email recipients after rendering 'to'")
        await self._notifications.send_email(
            context.tenant_id,
            recipients,
            self._renderer.render(cfg.subject, variables),
            self._renderer.render(cfg.body, variables),
        )
        return StepResult.ok({"email_sent": True, "email_recipient_count": len(recipients)})

    async def send_notification(
        self, config: dict[str, Any], context: StepContext
    ) -> StepResult:
        cfg = SendNotificationStepConfig.model_validate(config)
        variables = template_context(context)
        recipient = (
            self._renderer.render(cfg.recipient_id, variables).strip()
            if cfg.recipient_id
            else context.user_id
        )
        if not recipient or recipient == SYSTEM_USER_ID:
            return StepResult.failed("No notification recipient for this run")
        action_url = (
            self._renderer.render(cfg.action_url, variables) if cfg.action_url else None
        )
        await self._notifications.notify(
            context.tenant_id,
            recipient,
            self._renderer.render(cfg.title, variables),
            self._renderer.render(cfg.message, variables),
            action_url,
        )
        return StepResult.ok(
            {"notification_sent": True, "notification_recipient_id": recipient}
        )


def build_default_registry(
    *,
    http_client: httpx.AsyncClient | None = None,
    notification_service: INotificationService | None = None,
    renderer: WorkflowTemplateRenderer | None = None,
    webhook_timeout_seconds: float = DEFAULT_WEBHOOK_TIMEOUT_SECONDS,
    wait_delay_max_seconds: float = DEFAULT_WAIT_DELAY_MAX_SECONDS,
) -> StepHandlerRegistry:
    """Registry with the built-in handlers. CRM-mutating step types are left unregistered."""
    handlers = BuiltinStepHandlers(
        http_client=http_client,
        notification_service=notification_service,
        renderer=renderer,
        webhook_timeout_seconds=webhook_timeout_seconds,
        wait_delay_max_seconds=wait_delay_max_seconds,
    )
    registry = StepHandlerRegistry()
    registry.register(StepType.CONDITION, handlers.condition, ConditionStepConfig)
    registry.register(StepType.WAIT_DELAY, handlers.wait_delay, WaitDelayStepConfig)
    registry.register(StepType.WEBHOOK, handlers.webhook, WebhookStepConfig)
    registry.register(StepType.SEND_EMAIL, handlers.send_email, SendEmailStepConfig)
    registry.register(
        StepType.SEND_NOTIFICATION,
        handlers.send_notification,
        SendNotificationStepConfig,
    )
    return registry
