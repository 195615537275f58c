"""Time window validation."""

from datetime import datetime, timedelta, timezone

import pytest

from clinic_api.domain.scheduling.errors import InvalidTime
from clinic_api.domain.scheduling.time_validator import calculate_end_time, validate_appointment_time


def test_valid_window_is_returned_as_utc() -> None:
    start, end = validate_appointment_time("2024-01-01T10:00:00Z", "2024-01-01T10:30:00Z")
    assert start == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc)


def test_offsets_are_normalized_to_utc() -> None:
    start, end = validate_appointment_time("2024-01-01T13:00:00+03:00", "2024-01-01T10:20:00Z")
    assert start == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    assert end - start == timedelta(minutes=20)


def test_exactly_minimum_duration_is_accepted() -> None:
    validate_appointment_time("2024-01-01T10:00:00Z", "2024-01-01T10:05:00Z")


@pytest.mark.parametrize(
    "starts_at, ends_at, reason",
    [
        ("not-a-date", "2024-01-01T10:30:00Z", "bad format"),
        ("2024-01-01T10:00:00Z", "", "bad format"),
        ("2024-01-01T10:00:00Z", None, "bad format"),
        ("2024-01-01T10:00:00Z", "2024-01-01T10:00:00Z", "end before start"),
        ("2024-01-01T10:00:00Z", "2024-01-01T09:00:00Z", "end before start"),
        ("2024-01-01T10:00:00Z", "2024-01-01T10:02:00Z", "too short"),
        ("2024-01-01T10:00:00Z", "2024-01-01T10:04:59Z", "too short"),
    ],
)
def test_invalid_windows_are_rejected(starts_at, ends_at, reason) -> None:
    with pytest.raises(InvalidTime) as exc_info:
        validate_appointment_time(starts_at, ends_at)
    assert exc_info.value.message == reason
    assert exc_info.value.status_code == 400


def test_datetime_inputs_are_accepted() -> None:
    start = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    assert validate_appointment_time(start, start + timedelta(hours=1)) == (
        start,
        start + timedelta(hours=1),
    )


def test_default_end_time_is_thirty_minutes_later() -> None:
    assert calculate_end_time("2024-01-01T10:00:00Z") == datetime(
        2024, 1, 1, 10, 30, tzinfo=timezone.utc
    )


def test_end_time_of_unparseable_start_is_bad_format() -> None:
    with pytest.raises(InvalidTime, match="bad format"):
        calculate_end_time("tomorrow morning")


def test_epoch_milliseconds_are_accepted() -> None:
    start, end = validate_appointment_time(1704103200000, 1704105000000)
    assert start == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("starts_at", [True, float("nan"), 10**30, {"at": "10:00"}, ["2024-01-01"]])
def test_non_instant_values_are_bad_format(starts_at) -> None:
    with pytest.raises(InvalidTime, match="bad format"):
        validate_appointment_time(starts_at, "2024-01-01T10:30:00Z")
