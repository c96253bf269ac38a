from datetime import datetime, timezone


def isoformat_utc(value: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision, e.g. 2025-07-03T20:38:00.000Z.

    Naive values (SQLite) are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
