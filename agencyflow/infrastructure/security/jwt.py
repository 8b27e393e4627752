"""JWT bearer tokens: the platform's auth service issues them, this service verifies them.

Claims used here: sub (user id) and tenant_id. create_access_token exists
for dev tooling and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from agencyflow.core.config import get_settings


def create_access_token(
    user_id: str,
    tenant_id: str,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Return a signed token for user_id in tenant_id.

    TTL defaults to settings.access_token_expire_minutes.
    """
    settings = get_settings()
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {
        **(extra_claims or {}),
        "sub": user_id,
        "tenant_id": tenant_id,
        "exp": datetime.now(UTC) + ttl,
    }
    encoded = jwt.encode(
        claims,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Decode and verify a token; require exp, sub and tenant_id.

    Raises:
        ValueError: Invalid signature, expired, or a required claim is missing.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    for claim in ("sub", "tenant_id"):
        if not payload.get(claim):
            raise ValueError(f"Token missing required claim: {claim}")
    return payload
