# ecobites/core/dates.py
from datetime import datetime, timezone
from typing import Optional


def as_utc(v: Optional[datetime]) -> Optional[datetime]:
    # naive datetimes (e.g. "2030-01-01" from a form) are taken as UTC
    if v is None:
        return None
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)
