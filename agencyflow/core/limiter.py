"""Rate limiter instance for SlowAPI.

Shared so main (app.state.limiter) and route modules use the same instance.
Limit strings and decorators live here.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from agencyflow.core.config import get_settings
from agencyflow.infrastructure.security.jwt import verify_token

limiter = Limiter(key_func=get_remote_address)

WRITE_ENDPOINT_LIMIT = "120/minute"
CRON_LIMIT = "6/minute"


def manual_run_key(request: Request) -> str:
    """Bucket manual runs per (user, workflow); anonymous callers fall back to client address."""
    workflow_id = request.path_params.get("workflow_id", "")
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        try:
            payload = verify_token(auth[7:].strip())
            return f"manual-run:{payload['sub']}:{workflow_id}"
        except ValueError:
            pass
    return f"manual-run:{get_remote_address(request)}:{workflow_id}"


limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
limit_cron = limiter.limit(CRON_LIMIT)
limit_manual_execute = limiter.limit(
    lambda: get_settings().manual_execute_rate_limit, key_func=manual_run_key
)
