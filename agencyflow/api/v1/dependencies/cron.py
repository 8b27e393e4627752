"""Shared-secret check for scheduler-invoked routes."""

from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from agencyflow.core.config import get_settings
from agencyflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_cron_bearer = HTTPBearer(auto_error=False)


async def verify_cron_secret(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_cron_bearer)],
) -> None:
    """401 unless the bearer token equals CRON_SECRET. No secret configured rejects everything."""
    secret = get_settings().cron_secret
    if secret is None or not secret.get_secret_value():
        logger.warning("Cron call rejected: CRON_SECRET is not configured")
        raise HTTPException(status_code=401, detail="Unauthorized")
    if credentials is None or not hmac.compare_digest(
        credentials.credentials.encode(), secret.get_secret_value().encode()
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")
