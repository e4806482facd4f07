# perchfinder/engine/payload.py
import json
from datetime import tzinfo
from typing import Optional, Sequence

from perchfinder.engine.aggregation import aggregate
from perchfinder.engine.similarity import score_similar
from perchfinder.models.catch import CatchRecord
from perchfinder.models.recommendation import CurrentConditions, WaterStatsPayload

UNKNOWN_WATER_NAME = "Okänt vatten"


def build_water_stats_payload(catches: Sequence[CatchRecord], water_name: Optional[str],
                              current: Optional[CurrentConditions] = None,
                              tz: Optional[tzinfo] = None) -> Optional[WaterStatsPayload]:
    """
    Combine the water-wide statistics with the similar-conditions statistics.

    `similar_when_like_now` is attached only when live conditions are known and at
    least one catch carries weather data. None when the water has no catches.
    """
    name = water_name or UNKNOWN_WATER_NAME
    general = aggregate(catches, name, tz)
    if general is None:
        return None

    payload = WaterStatsPayload(water_name=name, total_catches=len(catches), general=general)
    if current is not None:
        payload.current_conditions = current
        similar = score_similar(catches, current, tz)
        if similar.compared_catch_count > 0:
            payload.similar_when_like_now = similar
    return payload


def compute_signature(payload: WaterStatsPayload) -> str:
    """
    Deterministic, order-sensitive serialisation of the full payload.
    Any field change (including live weather) yields a different signature.
    """
    return json.dumps(payload.to_dict(), ensure_ascii=False, separators=(",", ":"))
