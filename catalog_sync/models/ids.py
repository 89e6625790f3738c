# catalog_sync/models/ids.py

"""Client-side identity minting for products and comments."""

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Return a fresh random UUID4 string."""
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
