"""Appointment time window validation"""

from datetime import datetime, timedelta
from typing import Union

from ...config import DEFAULT_APPOINTMENT_MINUTES, MIN_APPOINTMENT_MINUTES
from ...shared.validators import parse_timestamp
from .errors import InvalidTime

MIN_DURATION = timedelta(minutes=MIN_APPOINTMENT_MINUTES)
DEFAULT_DURATION = timedelta(minutes=DEFAULT_APPOINTMENT_MINUTES)

Timestamp = Union[str, int, float, datetime]


def validate_appointment_time(starts_at: Timestamp, ends_at: Timestamp) -> tuple[datetime, datetime]:
    """
    Check that [starts_at, ends_at) is a usable appointment window.

    Args:
        starts_at: ISO-8601 string, epoch milliseconds or datetime
        ends_at: ISO-8601 string, epoch milliseconds or datetime

    Returns:
        The parsed (start, end) pair as aware UTC datetimes

    Raises:
        InvalidTime: "bad format", "end before start" or "too short"
    """
    try:
        start = parse_timestamp(starts_at)
        end = parse_timestamp(ends_at)
    except (TypeError, ValueError) as e:
        raise InvalidTime("bad format") from e

    if end <= start:
        raise InvalidTime("end before start")

    if end - start < MIN_DURATION:
        raise InvalidTime("too short")

    return start, end


def calculate_end_time(starts_at: Timestamp, duration: timedelta = DEFAULT_DURATION) -> datetime:
    """End of an appointment starting at starts_at; defaults to the standard slot length"""
    try:
        return parse_timestamp(starts_at) + duration
    except (TypeError, ValueError) as e:
        raise InvalidTime("bad format") from e
