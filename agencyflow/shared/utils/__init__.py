"""Shared utilities (datetime, id generation)."""

from agencyflow.shared.utils.datetime import (
    day_bounds,
    ensure_utc,
    local_now,
    local_today,
    utc_now,
)
from agencyflow.shared.utils.ids import generate_cuid, is_valid_identifier

__all__ = [
    "day_bounds",
    "ensure_utc",
    "generate_cuid",
    "is_valid_identifier",
    "local_now",
    "local_today",
    "utc_now",
]
