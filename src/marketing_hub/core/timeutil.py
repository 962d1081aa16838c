"""Instant parsing and alignment helpers - no I/O dependencies."""

from datetime import date, datetime, time, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_instant(value: str | datetime | date | None) -> datetime | None:
    """
    Parse an ISO-8601 string into a datetime.

    Accepts a trailing "Z", bare dates ("2024-01-01" -> midnight) and values
    that are already datetimes. Returns None for missing or unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_instant(value: datetime | None) -> str | None:
    """Serialize a datetime back to ISO-8601."""
    if value is None:
        return None
    return value.isoformat()


def align(value: datetime, ref: datetime) -> datetime:
    """
    Bring value into the same awareness as ref so the two can be compared.

    A naive value is read in ref's zone. An aware value compared against a
    naive ref is expressed as naive UTC wall time.
    """
    if (value.tzinfo is None) == (ref.tzinfo is None):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=ref.tzinfo)
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def epoch_millis(value: datetime) -> int:
    """Exact milliseconds since the Unix epoch. Naive values count as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // timedelta(milliseconds=1)


def sunday_index(value: datetime) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""
    # weekday(): Monday=0 .. Sunday=6
    return (value.weekday() + 1) % 7


def week_start(value: datetime) -> datetime:
    """The Sunday of value's week, keeping value's time of day."""
    return value - timedelta(days=sunday_index(value))
