# perchfinder/utils/test_datetime_utils.py
"""
Date/time utility tests

Usage: python -m pytest perchfinder/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, timezone, timedelta
from perchfinder.utils.datetime_utils import DateTimeUtils

def test_parse_iso_datetime():
    """ISO parsing always yields UTC-aware datetimes"""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+02:00",
        "2024-01-15T10:30:00.123Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc

def test_parse_iso_datetime_rejects_garbage():
    for bad in ["", "not-a-date", None, 42]:
        with pytest.raises(ValueError):
            DateTimeUtils.parse_iso_datetime(bad)

def test_parse_wall_clock_keeps_naive():
    dt = DateTimeUtils.parse_wall_clock("2024-06-01T07:45")
    assert dt.tzinfo is None
    assert dt.hour == 7

def test_local_hour_converts_aware_values():
    # 04:30 UTC is 06:30 in Stockholm during summer time
    assert DateTimeUtils.local_hour("2024-06-01T04:30:00Z", DateTimeUtils.get_timezone("Europe/Stockholm")) == 6
    assert DateTimeUtils.local_hour("2024-06-01T04:30:00Z", timezone.utc) == 4
    # naive values are already local
    assert DateTimeUtils.local_hour("2024-06-01T04:30:00", timezone(timedelta(hours=5))) == 4

def test_unknown_timezone_falls_back_to_utc():
    assert DateTimeUtils.get_timezone("Not/AZone") == timezone.utc

def test_to_iso_string():
    assert DateTimeUtils.to_iso_string(datetime(2024, 1, 15, 10, 30)) == "2024-01-15T10:30:00Z"
    aware = datetime(2024, 1, 15, 12, 30, tzinfo=timezone(timedelta(hours=2)))
    assert DateTimeUtils.to_iso_string(aware) == "2024-01-15T10:30:00Z"

def test_from_firestore():
    """Firestore datetimes become ISO strings, recursively"""
    converted = DateTimeUtils.from_firestore({
        'createdAt': datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        'nested': [{'savedAt': datetime(2024, 1, 1)}],
        'name': 'Brunnsviken',
    })
    assert converted['createdAt'] == "2024-01-15T10:30:00Z"
    assert converted['nested'][0]['savedAt'] == "2024-01-01T00:00:00Z"
    assert converted['name'] == 'Brunnsviken'

def test_timestamp_ms_round_trip_precision():
    dt = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert DateTimeUtils.to_timestamp_ms(dt) == 1705314600000
    assert DateTimeUtils.from_timestamp_ms(1705314600000) == dt
    with pytest.raises(ValueError):
        DateTimeUtils.from_timestamp_ms("1705314600000")

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
