"""Request identifier helpers."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone


def generate_request_id() -> str:
    now = datetime.now(tz=timezone.utc)
    # Sortable by time; the random suffix separates requests within one microsecond.
    return f"{now.strftime('req-%Y%m%dT%H%M%S%fZ')}-{secrets.token_hex(3)}"
