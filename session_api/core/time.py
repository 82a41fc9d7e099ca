# session_api/core/time.py

from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC, the way every DateTime column is stored
    return datetime.now(tz=timezone.utc).replace(tzinfo=None)


def from_timestamp(ts: int) -> datetime:
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).replace(tzinfo=None)
