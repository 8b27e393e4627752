"""Bearer-token identity and tenant resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from agencyflow.core.config import get_settings
from agencyflow.infrastructure.security.jwt import verify_token
from agencyflow.shared.utils.ids import is_valid_identifier

_http_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity taken from a verified bearer token."""

    id: str
    tenant_id: str


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> CurrentUser | None:
    """Return the caller from the JWT if present and valid; else None."""
    if not credentials:
        return None
    try:
        payload = verify_token(credentials.credentials)
    except ValueError:
        return None
    user_id = str(payload["sub"])
    tenant_id = str(payload["tenant_id"])
    if not is_valid_identifier(user_id) or not is_valid_identifier(tenant_id):
        return None
    return CurrentUser(id=user_id, tenant_id=tenant_id)


async def get_current_user(
    current_user: Annotated[CurrentUser | None, Depends(get_current_user_optional)],
) -> CurrentUser:
    """Return the caller; 401 if the token is missing or invalid."""
    if current_user is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user


async def get_tenant_id(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> str:
    """Tenant of the caller. An X-Tenant-ID header, if sent, must match the token (else 403)."""
    name = get_settings().tenant_header_name
    header_value = request.headers.get(name)
    if header_value is not None and header_value.strip() != current_user.tenant_id:
        raise HTTPException(status_code=403, detail="Tenant does not match credentials")
    return current_user.tenant_id
