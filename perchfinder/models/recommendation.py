# perchfinder/models/recommendation.py
"""
Statistics payload sent to the advice endpoint, and the cached advice.
`to_dict()` produces the camelCase wire format; key order is part of the cache signature.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


@dataclass
class CurrentConditions:
    """Live weather at the water when a recommendation is requested."""
    observed_at_iso: str
    time_of_day: str
    weather_summary: Optional[str] = None
    weather_code: Optional[int] = None
    temperature_c: Optional[float] = None
    pressure_hpa: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'observedAtIso': self.observed_at_iso,
            'weatherSummary': self.weather_summary,
            'weatherCode': self.weather_code,
            'temperatureC': self.temperature_c,
            'pressureHpa': self.pressure_hpa,
            'timeOfDay': self.time_of_day,
        }


@dataclass
class GeneralStats:
    """Water-wide aggregation over every catch."""
    best_time_of_day: str
    top_lures: List[str] = field(default_factory=list)
    top_lure_categories: List[str] = field(default_factory=list)
    top_methods: List[str] = field(default_factory=list)
    top_jig_methods: List[str] = field(default_factory=list)
    avg_temp_c: Optional[float] = None
    common_weather: Optional[str] = None
    avg_pressure_hpa: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'topLures': list(self.top_lures),
            'topLureCategories': list(self.top_lure_categories),
            'topMethods': list(self.top_methods),
            'topJigMethods': list(self.top_jig_methods),
            'bestTimeOfDay': self.best_time_of_day,
            'avgTempC': self.avg_temp_c,
            'commonWeather': self.common_weather,
            'avgPressureHpa': self.avg_pressure_hpa,
        }


@dataclass
class SimilarStats:
    """Aggregation restricted to the catches whose conditions most resemble now."""
    compared_catch_count: int = 0
    matched_catch_count: int = 0
    top_lures: List[str] = field(default_factory=list)
    top_lure_categories: List[str] = field(default_factory=list)
    top_methods: List[str] = field(default_factory=list)
    top_jig_methods: List[str] = field(default_factory=list)
    top_times_of_day: List[str] = field(default_factory=list)
    common_weather: Optional[str] = None
    avg_temp_c: Optional[float] = None
    avg_pressure_hpa: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'topLures': list(self.top_lures),
            'topLureCategories': list(self.top_lure_categories),
            'topMethods': list(self.top_methods),
            'topJigMethods': list(self.top_jig_methods),
            'topTimesOfDay': list(self.top_times_of_day),
            'commonWeather': self.common_weather,
            'avgTempC': self.avg_temp_c,
            'avgPressureHpa': self.avg_pressure_hpa,
            'comparedCatchCount': self.compared_catch_count,
            'matchedCatchCount': self.matched_catch_count,
        }


@dataclass
class WaterStatsPayload:
    water_name: str
    total_catches: int
    general: GeneralStats
    current_conditions: Optional[CurrentConditions] = None
    similar_when_like_now: Optional[SimilarStats] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'waterName': self.water_name,
            'totalCatches': self.total_catches,
            'general': self.general.to_dict(),
        }
        if self.current_conditions is not None:
            data['currentConditions'] = self.current_conditions.to_dict()
        if self.similar_when_like_now is not None:
            data['similarWhenLikeNow'] = self.similar_when_like_now.to_dict()
        return data


@dataclass
class CachedRecommendation:
    signature: str
    recommendation: str
    saved_at: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedRecommendation":
        """:raises ValueError: when the stored entry does not have the expected shape"""
        if not isinstance(data, dict):
            raise ValueError("cached recommendation must be an object")
        signature = data.get('signature')
        recommendation = data.get('recommendation')
        saved_at = data.get('savedAt')
        if not all(isinstance(value, str) for value in (signature, recommendation, saved_at)):
            raise ValueError("cached recommendation is missing fields")
        return cls(signature=signature, recommendation=recommendation, saved_at=saved_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'signature': self.signature,
            'recommendation': self.recommendation,
            'savedAt': self.saved_at,
        }
