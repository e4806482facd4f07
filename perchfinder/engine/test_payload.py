# perchfinder/engine/test_payload.py
from datetime import timezone

from perchfinder.engine.payload import build_water_stats_payload, compute_signature
from perchfinder.models.catch import CatchRecord
from perchfinder.models.recommendation import CurrentConditions
from perchfinder.utils.datetime_utils import DateTimeUtils

UTC = timezone.utc


def _catch(**kwargs):
    return CatchRecord(water_id="w1", caught_at=DateTimeUtils.parse_wall_clock("2024-06-01T07:00:00Z"), **kwargs)


def _now(**kwargs):
    defaults = dict(observed_at_iso="2024-06-10T07:15", time_of_day="Morgon", temperature_c=9.0,
                    pressure_hpa=1014.0, weather_code=2, weather_summary="Mest klart")
    defaults.update(kwargs)
    return CurrentConditions(**defaults)


def test_no_catches_gives_no_payload():
    assert build_water_stats_payload([], "Brunnsviken", _now(), UTC) is None

def test_payload_without_live_weather_has_only_general():
    payload = build_water_stats_payload([_catch(temperature_c=10.0)], "Brunnsviken", None, UTC)
    data = payload.to_dict()
    assert list(data) == ["waterName", "totalCatches", "general"]
    assert data["totalCatches"] == 1

def test_similar_section_requires_comparable_catches():
    payload = build_water_stats_payload([_catch(), _catch()], "Brunnsviken", _now(), UTC)
    assert payload.current_conditions is not None
    assert payload.similar_when_like_now is None

    payload = build_water_stats_payload([_catch(), _catch(pressure_hpa=1010.0)], "Brunnsviken", _now(), UTC)
    assert payload.similar_when_like_now.compared_catch_count == 1
    assert "similarWhenLikeNow" in payload.to_dict()

def test_missing_water_name_gets_placeholder():
    payload = build_water_stats_payload([_catch()], None, None, UTC)
    assert payload.water_name == "Okänt vatten"

def test_signature_is_stable_and_covers_live_weather():
    catches = [_catch(temperature_c=10.0)]
    first = compute_signature(build_water_stats_payload(catches, "Brunnsviken", _now(), UTC))
    again = compute_signature(build_water_stats_payload(catches, "Brunnsviken", _now(), UTC))
    assert first == again

    changed_weather = compute_signature(build_water_stats_payload(catches, "Brunnsviken", _now(pressure_hpa=1015.0), UTC))
    assert changed_weather != first

    without_weather = compute_signature(build_water_stats_payload(catches, "Brunnsviken", None, UTC))
    assert without_weather != first

def test_signature_keeps_non_ascii_text():
    signature = compute_signature(build_water_stats_payload([_catch()], "Mälaren", None, UTC))
    assert '"waterName":"Mälaren"' in signature
