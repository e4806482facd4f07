# perchfinder/engine/labels.py
"""
Per-catch labels used by the aggregation and similarity engines.
"""

from collections import Counter
from datetime import datetime, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Union

from perchfinder.models.catch import CatchRecord, LureOption
from perchfinder.utils.datetime_utils import DateTimeUtils

MORNING = "Morgon"
DAY = "Dag"
EVENING = "Kväll"
NIGHT = "Natt"
TIME_BUCKETS = (MORNING, DAY, EVENING, NIGHT)

UNKNOWN_WEATHER = "Okänt"

# WMO weather interpretation codes (as returned by Open-Meteo) -> Swedish label
WEATHER_CODE_LABELS = {
    0: "Klart",
    1: "Mest klart",
    2: "Mest klart",
    3: "Molnigt",
    45: "Dimmigt",
    48: "Dimmigt",
    51: "Duggregn",
    53: "Duggregn",
    55: "Duggregn",
    56: "Underkylt duggregn",
    57: "Underkylt duggregn",
    61: "Regn",
    63: "Regn",
    65: "Regn",
    66: "Underkylt regn",
    67: "Underkylt regn",
    71: "Snöfall",
    73: "Snöfall",
    75: "Snöfall",
    77: "Snökorn",
    80: "Skurar",
    81: "Skurar",
    82: "Skurar",
    85: "Snöbyar",
    86: "Snöbyar",
    95: "Åska",
    96: "Åska",
    99: "Åska",
}


def map_weather_code(code: Optional[int]) -> Optional[str]:
    """Swedish label for a WMO code, None for unmapped codes."""
    if code is None:
        return None
    return WEATHER_CODE_LABELS.get(code)


def time_bucket_for_hour(hour: int) -> str:
    if 5 <= hour < 10:
        return MORNING
    if 10 <= hour < 16:
        return DAY
    if 16 <= hour < 22:
        return EVENING
    return NIGHT


def time_bucket(value: Union[str, datetime], tz: Optional[tzinfo] = None) -> str:
    """Time-of-day bucket of a timestamp in local time."""
    return time_bucket_for_hour(DateTimeUtils.local_hour(value, tz))


def lure_label(lure: Optional[LureOption]) -> Optional[str]:
    """'{brand} {name} {color}', blanks skipped; None without a lure."""
    if lure is None:
        return None
    parts = [part.strip() for part in (lure.brand, lure.name, lure.color) if part and part.strip()]
    return " ".join(parts) or None


def lure_category_label(lure: Optional[LureOption]) -> Optional[str]:
    if lure is None:
        return None
    for value in (lure.category, lure.type):
        if value and value.strip():
            return value.strip()
    return None


def is_jig_lure(lure: Optional[LureOption]) -> bool:
    """Soft-plastic jig lures: category or legacy type mentions 'jigg'."""
    if lure is None:
        return False
    return any("jigg" in (value or "").lower() for value in (lure.category, lure.type))


def method_label(method: Optional[str]) -> Optional[str]:
    if not method:
        return None
    return method.strip() or None


def weather_label(catch: CatchRecord) -> str:
    if catch.weather_summary:
        return catch.weather_summary
    mapped = map_weather_code(catch.weather_code)
    if mapped:
        return mapped
    if catch.weather_code is not None:
        return f"Kod {catch.weather_code}"
    return UNKNOWN_WEATHER


def top_labels(counter: Counter, limit: int) -> List[str]:
    """Highest counts first; equal counts keep first-seen order."""
    return [label for label, _ in counter.most_common(limit)]


def mean(values: List[float], digits: int) -> Optional[float]:
    """Average rounded half away from zero (10.25 -> 10.3, 1012.5 -> 1013)."""
    if not values:
        return None
    average = Decimal(sum(values) / len(values))
    if digits == 0:
        return int(average.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return float(average.quantize(Decimal(10) ** -digits, rounding=ROUND_HALF_UP))
