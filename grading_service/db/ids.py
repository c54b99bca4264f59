from __future__ import annotations

import uuid


def parse_uuid(value: str) -> uuid.UUID | None:
    """UUID from a path/JWT string, or None when it cannot be one.

    Lets repos answer "not found" for a malformed id instead of raising
    a driver error.
    """
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
