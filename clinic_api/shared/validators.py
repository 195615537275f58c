"""Shared validation utilities"""

from datetime import datetime, timezone
from typing import Optional, Union


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach or convert to UTC.

    Naive datetimes are taken to already be UTC; this is how timestamps come back
    from backends that do not keep an offset (SQLite).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Union[str, int, float, datetime]) -> datetime:
    """
    Parse an instant into an aware UTC datetime.

    Accepts ISO-8601 strings (a trailing "Z" as well as explicit offsets) and
    numbers as milliseconds since the Unix epoch. Strings without an offset are
    read as UTC.

    Raises:
        ValueError: If the value is not a parseable instant
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"Timestamp out of range: {value!r}") from e
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a timestamp: {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))
