"""Print a bearer token for local development.

Usage:
    python -m scripts.issue_dev_token <user_id> <tenant_id> [ttl_minutes]
Signs with SECRET_KEY from the environment or .env. Never use in production.
"""

import sys
from datetime import timedelta

from agencyflow.infrastructure.security.jwt import create_access_token
from agencyflow.shared.utils.ids import is_valid_identifier


def main() -> None:
    if len(sys.argv) < 3:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    user_id, tenant_id = sys.argv[1], sys.argv[2]
    for label, value in (("user_id", user_id), ("tenant_id", tenant_id)):
        if not is_valid_identifier(value):
            print(f"Invalid {label}: {value!r}", file=sys.stderr)
            sys.exit(2)
    ttl = timedelta(minutes=int(sys.argv[3])) if len(sys.argv) > 3 else None
    print(create_access_token(user_id, tenant_id, expires_delta=ttl))


if __name__ == "__main__":
    main()
