# perchfinder/engine/similarity.py
"""
"Similar conditions" scoring.

Every catch with a weather snapshot gets a distance to the current conditions
(lower is more similar). The closest catches are aggregated the same way as the
water-wide statistics, with shorter top lists.
"""

import logging
import math
from datetime import tzinfo
from typing import List, Optional, Sequence, Tuple

from perchfinder.engine import labels
from perchfinder.engine.aggregation import tally_catches
from perchfinder.models.catch import CatchRecord
from perchfinder.models.recommendation import CurrentConditions, SimilarStats

logger = logging.getLogger(__name__)

MISSING_TEMPERATURE_PENALTY = 6.0
MISSING_PRESSURE_PENALTY = 16.0
# hPa spans hundreds, °C tens: scale pressure down before summing
PRESSURE_DIVISOR = 4.0
WEATHER_MISMATCH_PENALTY = 8.0
TIME_MISMATCH_PENALTY = 4.0

MIN_MATCHES = 5
MAX_MATCHES = 12
MATCH_FRACTION = 0.35

SIMILAR_TOP_N = 3
SIMILAR_TOP_TIMES = 2


def score_catch(catch: CatchRecord, current: CurrentConditions,
                tz: Optional[tzinfo] = None) -> float:
    """Distance between a catch's logged conditions and the current ones."""
    if catch.temperature_c is not None and current.temperature_c is not None:
        temp_delta = abs(catch.temperature_c - current.temperature_c)
    else:
        temp_delta = MISSING_TEMPERATURE_PENALTY

    if catch.pressure_hpa is not None and current.pressure_hpa is not None:
        pressure_delta = abs(catch.pressure_hpa - current.pressure_hpa)
    else:
        pressure_delta = MISSING_PRESSURE_PENALTY

    weather_penalty = 0.0
    if (catch.weather_code is not None and current.weather_code is not None
            and catch.weather_code != current.weather_code):
        weather_penalty = WEATHER_MISMATCH_PENALTY

    time_penalty = 0.0
    if labels.time_bucket(catch.caught_at, tz) != current.time_of_day:
        time_penalty = TIME_MISMATCH_PENALTY

    return temp_delta + pressure_delta / PRESSURE_DIVISOR + weather_penalty + time_penalty


def match_window(comparable_count: int) -> int:
    """How many of the closest catches to keep: 35% of the data, clamped to 5..12."""
    return min(MAX_MATCHES, max(MIN_MATCHES, math.ceil(MATCH_FRACTION * comparable_count)))


def rank_similar(catches: Sequence[CatchRecord], current: CurrentConditions,
                 tz: Optional[tzinfo] = None) -> List[Tuple[float, CatchRecord]]:
    """Comparable catches with their scores, most similar first (stable on ties)."""
    scored = [
        (score_catch(catch, current, tz), catch)
        for catch in catches
        if catch.has_weather_data()
    ]
    return sorted(scored, key=lambda item: item[0])


def score_similar(catches: Sequence[CatchRecord], current: CurrentConditions,
                  tz: Optional[tzinfo] = None) -> SimilarStats:
    """
    Aggregate the catches most resembling the current conditions.

    Returns a zeroed result (compared_catch_count == 0) when no catch carries
    weather data.
    """
    ranked = rank_similar(catches, current, tz)
    if not ranked:
        return SimilarStats()

    matched = [catch for _, catch in ranked[:match_window(len(ranked))]]
    tally = tally_catches(matched, tz)

    logger.debug(
        f"Similar conditions: {len(matched)} of {len(ranked)} comparable catches, "
        f"best score {ranked[0][0]:.2f}"
    )
    return SimilarStats(
        compared_catch_count=len(ranked),
        matched_catch_count=len(matched),
        top_lures=labels.top_labels(tally.lures, SIMILAR_TOP_N),
        top_lure_categories=labels.top_labels(tally.lure_categories, SIMILAR_TOP_N),
        top_methods=labels.top_labels(tally.methods, SIMILAR_TOP_N),
        top_jig_methods=labels.top_labels(tally.jig_methods, SIMILAR_TOP_N),
        top_times_of_day=labels.top_labels(tally.times_of_day, SIMILAR_TOP_TIMES),
        common_weather=tally.common_weather,
        avg_temp_c=tally.avg_temp_c,
        avg_pressure_hpa=tally.avg_pressure_hpa,
    )
