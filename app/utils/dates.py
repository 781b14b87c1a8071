"""UTC time helpers.

Timestamps are stored as naive UTC datetimes. Anything coming in from
JSON or an aware datetime is normalised to that form before comparison.
"""

from datetime import datetime, timezone


def utcnow():
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value):
    """
    Normalise a datetime or ISO-8601 string to a naive UTC datetime.

    Accepts a trailing 'Z'. Returns None for None.

    Raises:
        ValueError: if the value is not a datetime or a parseable string
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        value = datetime.fromisoformat(text)
    if not isinstance(value, datetime):
        raise ValueError(f'Not a timestamp: {value!r}')
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_isoformat(dt):
    """Convert datetime to ISO format with Z suffix to indicate UTC."""
    if dt is None:
        return None
    return dt.isoformat() + 'Z'
