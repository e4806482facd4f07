# perchfinder/engine/aggregation.py
"""
Water-wide catch statistics.

Pure functions: the same catch list (and timezone) always gives the same result.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import List, Optional, Sequence

from perchfinder.engine import labels
from perchfinder.models.catch import CatchRecord
from perchfinder.models.recommendation import GeneralStats

logger = logging.getLogger(__name__)

GENERAL_TOP_N = 4


@dataclass
class CatchTally:
    """Frequency counts and raw measurements collected from a set of catches."""
    lures: Counter = field(default_factory=Counter)
    lure_categories: Counter = field(default_factory=Counter)
    methods: Counter = field(default_factory=Counter)
    jig_methods: Counter = field(default_factory=Counter)
    times_of_day: Counter = field(default_factory=Counter)
    weather: Counter = field(default_factory=Counter)
    temperatures: List[float] = field(default_factory=list)
    pressures: List[float] = field(default_factory=list)

    @property
    def avg_temp_c(self) -> Optional[float]:
        return labels.mean(self.temperatures, 1)

    @property
    def avg_pressure_hpa(self) -> Optional[float]:
        return labels.mean(self.pressures, 0)

    @property
    def common_weather(self) -> Optional[str]:
        top = labels.top_labels(self.weather, 1)
        return top[0] if top else None


def tally_catches(catches: Sequence[CatchRecord], tz: Optional[tzinfo] = None) -> CatchTally:
    tally = CatchTally()
    for catch in catches:
        lure_label = labels.lure_label(catch.lure)
        if lure_label:
            tally.lures[lure_label] += 1

        category = labels.lure_category_label(catch.lure)
        if category:
            tally.lure_categories[category] += 1

        method = labels.method_label(catch.method)
        if method:
            tally.methods[method] += 1
            if labels.is_jig_lure(catch.lure):
                tally.jig_methods[method] += 1

        tally.times_of_day[labels.time_bucket(catch.caught_at, tz)] += 1
        tally.weather[labels.weather_label(catch)] += 1

        if catch.temperature_c is not None:
            tally.temperatures.append(catch.temperature_c)
        if catch.pressure_hpa is not None:
            tally.pressures.append(catch.pressure_hpa)
    return tally


def aggregate(catches: Sequence[CatchRecord], water_name: str,
              tz: Optional[tzinfo] = None) -> Optional[GeneralStats]:
    """
    Aggregate every catch of a water.

    :param catches: full catch list of one water
    :param water_name: display label, only used for logging
    :param tz: local timezone for the time-of-day buckets
    :return: GeneralStats, or None when there are no catches
    """
    if not catches:
        return None

    tally = tally_catches(catches, tz)
    stats = GeneralStats(
        best_time_of_day=labels.top_labels(tally.times_of_day, 1)[0],
        top_lures=labels.top_labels(tally.lures, GENERAL_TOP_N),
        top_lure_categories=labels.top_labels(tally.lure_categories, GENERAL_TOP_N),
        top_methods=labels.top_labels(tally.methods, GENERAL_TOP_N),
        top_jig_methods=labels.top_labels(tally.jig_methods, GENERAL_TOP_N),
        avg_temp_c=tally.avg_temp_c,
        common_weather=tally.common_weather,
        avg_pressure_hpa=tally.avg_pressure_hpa,
    )
    logger.debug(f"Aggregated {len(catches)} catches for '{water_name}'")
    return stats
