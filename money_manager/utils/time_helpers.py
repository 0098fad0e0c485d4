from datetime import datetime, timezone
from typing import Optional, Tuple


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp, the format every datetime column stores."""
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Sin zona horaria se asume UTC (SQLite devuelve los valores sin tz)
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def month_window(month: Optional[str] = None) -> Tuple[datetime, datetime]:
    """Return ``[start, end)`` for ``YYYY-MM`` (current UTC month when omitted).

    Raises ``ValueError`` for a malformed month.
    """
    if month:
        year_str, _, month_str = month.partition("-")
        year, month_num = int(year_str), int(month_str)
        if not 1 <= month_num <= 12:
            raise ValueError("month out of range")
    else:
        now = utcnow()
        year, month_num = now.year, now.month

    start = datetime(year, month_num, 1, tzinfo=timezone.utc)
    if month_num == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month_num + 1, 1, tzinfo=timezone.utc)
    return start, end
