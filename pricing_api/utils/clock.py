# pricing_api/utils/clock.py
from datetime import datetime, timezone


def now_utc() -> datetime:
    # naive UTC, the same shape the promotions store uses
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
