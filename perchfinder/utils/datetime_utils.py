# perchfinder/utils/datetime_utils.py
"""
Centralised date/time helpers used across the project.

Responsibilities:
1. Parse ISO-8601 strings coming from clients, Firestore and the weather API
2. Convert catch timestamps into the angler's local wall-clock time
3. Keep Firestore values (Timestamp / DatetimeWithNanoseconds) interchangeable with datetime
4. Produce epoch milliseconds for the rate-limit counters
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional, Union
from dateutil import parser as dateutil_parser
from dateutil import tz as dateutil_tz

logger = logging.getLogger(__name__)

# Catches are logged in Sweden; buckets (Morgon/Dag/Kväll/Natt) use this wall clock.
DEFAULT_TIMEZONE_NAME = "Europe/Stockholm"


class DateTimeUtils:
    """Static helpers for date/time handling."""

    @staticmethod
    def now() -> datetime:
        """Current time as a UTC timezone-aware datetime."""
        return datetime.now(timezone.utc)

    @staticmethod
    def now_ms() -> int:
        """Current time as Unix epoch milliseconds."""
        return DateTimeUtils.to_timestamp_ms(DateTimeUtils.now())

    @staticmethod
    def get_timezone(name: Optional[str] = None) -> tzinfo:
        """
        Resolve an IANA timezone name, falling back to UTC when unknown.

        :param name: e.g. 'Europe/Stockholm'; None selects the project default
        """
        resolved = dateutil_tz.gettz(name or DEFAULT_TIMEZONE_NAME)
        if resolved is None:
            logger.warning(f"Unknown timezone '{name}', falling back to UTC")
            return timezone.utc
        return resolved

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        Parse an ISO string into a UTC timezone-aware datetime.

        Supported:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+02:00
        - 2024-01-15T10:30:00.123Z
        - 2024-01-15T10:30 (assumed UTC)
        """
        dt = DateTimeUtils.parse_wall_clock(iso_string)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def parse_wall_clock(value: Union[str, datetime]) -> datetime:
        """
        Parse an ISO string without normalising its timezone.

        Offset-less strings stay naive and are read as local wall-clock time
        (Open-Meteo returns `current.time` that way when called with timezone=auto).
        """
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Invalid ISO datetime: {value!r}")
        try:
            text = value.strip()
            if text.endswith('Z'):
                text = text[:-1] + '+00:00'
            return dateutil_parser.isoparse(text)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid ISO datetime: {value!r}") from e

    @staticmethod
    def local_hour(value: Union[str, datetime], tz: Optional[tzinfo] = None) -> int:
        """
        Hour of day (0-23) of a timestamp in the given local timezone.
        Aware values are converted; naive values are already local.
        """
        dt = DateTimeUtils.parse_wall_clock(value)
        if dt.tzinfo is not None:
            dt = dt.astimezone(tz or DateTimeUtils.get_timezone())
        return dt.hour

    @staticmethod
    def is_valid_iso(value: Any) -> bool:
        try:
            DateTimeUtils.parse_wall_clock(value)
            return True
        except ValueError:
            return False

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime -> ISO string in UTC with a 'Z' suffix."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Convert values read from Firestore.

        - Timestamp / DatetimeWithNanoseconds -> ISO string ('Z')
        - dict/list converted recursively
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.to_iso_string(obj)
        if hasattr(obj, 'timestamp') and callable(obj.timestamp):
            return DateTimeUtils.to_iso_string(datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc))
        if isinstance(obj, dict):
            return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_timestamp_ms(timestamp_ms: Union[int, float]) -> datetime:
        """Unix epoch milliseconds -> UTC datetime."""
        if isinstance(timestamp_ms, bool) or not isinstance(timestamp_ms, (int, float)):
            raise ValueError(f"timestamp_ms must be numeric: {timestamp_ms!r}")
        return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)

    @staticmethod
    def to_timestamp_ms(dt: datetime) -> int:
        """datetime -> Unix epoch milliseconds (naive values assumed UTC)."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(dt.timestamp() * 1000)


def now() -> datetime:
    return DateTimeUtils.now()

def now_ms() -> int:
    return DateTimeUtils.now_ms()

def parse_iso(iso_string: str) -> datetime:
    return DateTimeUtils.parse_iso_datetime(iso_string)

def to_iso(dt: datetime) -> str:
    return DateTimeUtils.to_iso_string(dt)

def from_firestore(obj: Any) -> Any:
    return DateTimeUtils.from_firestore(obj)
