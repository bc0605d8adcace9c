from __future__ import annotations

import uuid
from datetime import datetime, timezone


# PUBLIC_INTERFACE
def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def new_identifier() -> str:
    """Return a fresh opaque identifier (UUID4, canonical string form)."""
    return str(uuid.uuid4())
