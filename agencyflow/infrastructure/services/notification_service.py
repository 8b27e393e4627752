"""Log-only notification sender used until an email/in-app provider is wired in."""

from __future__ import annotations

import logging

from agencyflow.shared.telemetry.logging import get_logger
from agencyflow.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class LogOnlyNotificationService:
    """INotificationService implementation that logs instead of delivering.

    Production swaps in a provider-backed implementation via build_default_registry.
    """

    async def send_email(
        self, tenant_id: str, to: list[str], subject: str, body: str
    ) -> None:
        recipients = [r for r in to or [] if r]
        subject_preview = (subject or "")[:80]
        if not recipients:
            logger.info(
                "Workflow email: no recipients, skipping send (tenant_id=%s, subject=%r)",
                tenant_id,
                subject_preview,
            )
            return
        logger.info(
            "Workflow email: would send to %d recipient(s) (tenant_id=%s, subject=%r)",
            len(recipients),
            tenant_id,
            subject_preview,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Workflow email recipients: %s (at %s)",
                recipients,
                utc_now().isoformat(),
            )
        logger.debug("Workflow email body (first 500 chars): %s", (body or "")[:500])

    async def notify(
        self,
        tenant_id: str,
        recipient_id: str,
        title: str,
        message: str,
        action_url: str | None = None,
    ) -> None:
        logger.info(
            "Workflow notification: would notify user %s (tenant_id=%s, title=%r, action_url=%s)",
            recipient_id,
            tenant_id,
            (title or "")[:80],
            action_url,
        )
