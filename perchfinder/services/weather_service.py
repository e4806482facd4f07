# perchfinder/services/weather_service.py
import logging
from typing import Optional, Dict, Any

import requests

from perchfinder.engine import labels
from perchfinder.models.recommendation import CurrentConditions
from perchfinder.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

DEFAULT_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"
CURRENT_FIELDS = "temperature_2m,weather_code,surface_pressure"


class WeatherService:
    """
    Current weather at a coordinate from Open-Meteo (no API key).
    Lookups are best-effort: every failure is logged and reported as None.
    """

    def __init__(self, base_url: str = DEFAULT_WEATHER_URL, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "WeatherService":
        return cls(
            base_url=config.get('WEATHER_API_URL', DEFAULT_WEATHER_URL),
            timeout=config.get('WEATHER_TIMEOUT_SECONDS', 10.0),
        )

    def fetch_current(self, lat: float, lng: float) -> Dict[str, Any]:
        """
        Raw `current` block for a coordinate.

        :raises requests.RequestException: network or HTTP failure
        :raises ValueError: response without a `current` block
        """
        params = {
            "latitude": lat,
            "longitude": lng,
            "current": CURRENT_FIELDS,
            "timezone": "auto",
        }
        response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        current = data.get("current") or data.get("current_weather")
        if not isinstance(current, dict):
            raise ValueError("Weather response has no current conditions")
        return current

    def get_current_conditions(self, lat: float, lng: float) -> Optional[CurrentConditions]:
        """Current conditions, or None when the lookup fails."""
        try:
            current = self.fetch_current(lat, lng)
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Weather lookup failed for ({lat}, {lng}): {e}")
            return None

        observed_at = current.get("time")
        if not DateTimeUtils.is_valid_iso(observed_at):
            logger.warning(f"Weather response has an invalid time: {observed_at!r}")
            return None

        weather_code = _number(current.get("weather_code", current.get("weathercode")))
        weather_code = int(weather_code) if weather_code is not None else None
        return CurrentConditions(
            observed_at_iso=observed_at,
            time_of_day=labels.time_bucket(observed_at),
            weather_summary=labels.map_weather_code(weather_code),
            weather_code=weather_code,
            temperature_c=_number(current.get("temperature_2m", current.get("temperature"))),
            pressure_hpa=_number(current.get("surface_pressure")),
        )


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value
