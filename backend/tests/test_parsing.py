from datetime import datetime, timedelta, timezone

import pytest

from backend.app.services.parsing import (
    format_rfc3339,
    iso8601_duration_to_seconds,
    parse_iso8601_datetime,
)


def test_iso8601_duration_to_seconds():
    assert iso8601_duration_to_seconds("PT1H2M3S") == 3723
    assert iso8601_duration_to_seconds("PT45M") == 2700
    assert iso8601_duration_to_seconds("PT30S") == 30
    assert iso8601_duration_to_seconds("PT1H") == 3600
    assert iso8601_duration_to_seconds("PT") == 0


def test_iso8601_duration_accepts_large_hour_counts():
    assert iso8601_duration_to_seconds("PT1000H") == 3_600_000


@pytest.mark.parametrize("value", [None, "", "abc", "1H2M", 42])
def test_iso8601_duration_unparseable(value):
    assert iso8601_duration_to_seconds(value) is None


def test_parse_iso8601_datetime_zulu_and_offset():
    zulu = parse_iso8601_datetime("2025-06-01T10:00:00Z")
    offset = parse_iso8601_datetime("2025-06-01T12:00:00+02:00")
    assert zulu == datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)
    assert zulu == offset


def test_parse_iso8601_datetime_naive_is_utc():
    parsed = parse_iso8601_datetime("2025-06-01T10:00:00")
    assert parsed.tzinfo is not None
    assert parsed.utcoffset() == timedelta(0)


@pytest.mark.parametrize("value", [None, "", "yesterday"])
def test_parse_iso8601_datetime_invalid(value):
    assert parse_iso8601_datetime(value) is None


def test_format_rfc3339_uses_zulu_suffix():
    value = datetime(2025, 6, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
    assert format_rfc3339(value) == "2025-06-01T12:30:00.000Z"
