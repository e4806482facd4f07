# perchfinder/models/catch.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any
import logging

from perchfinder.utils.datetime_utils import DateTimeUtils

MAX_WEIGHT_G = 30000
MAX_LENGTH_CM = 200


@dataclass
class LureOption:
    """
    Entry of the shared lure catalog ('Lures' collection).
    `type` is the legacy category field of older catalog documents.
    """
    id: Optional[str] = None
    brand: str = ""
    name: str = ""
    size: str = ""
    color: str = ""
    category: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LureOption":
        return cls(
            id=data.get('id'),
            brand=data.get('brand') or "",
            name=data.get('name') or "",
            size=data.get('size') or "",
            color=data.get('color') or "",
            category=data.get('category'),
            type=data.get('type'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'brand': self.brand,
            'name': self.name,
            'size': self.size,
            'color': self.color,
            'category': self.category,
            'type': self.type,
        }


@dataclass
class CatchRecord:
    """
    Firestore 'Fangster' collection document.
    `caught_at` keeps the offset of the stored value; naive values are local wall-clock time.
    The weather snapshot is the one captured when the catch was logged.
    """
    water_id: str
    caught_at: datetime
    catch_id: Optional[str] = None
    weight_g: Optional[float] = None
    length_cm: Optional[float] = None
    lure: Optional[LureOption] = None
    method: Optional[str] = None
    weather_code: Optional[int] = None
    weather_summary: Optional[str] = None
    temperature_c: Optional[float] = None
    pressure_hpa: Optional[float] = None
    notes: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], catch_id: Optional[str] = None) -> "CatchRecord":
        """
        Build a record from a camelCase Firestore document.

        :raises ValueError: caughtAt missing or unparseable
        """
        caught_at = DateTimeUtils.parse_wall_clock(data.get('caughtAt'))
        lure_data = data.get('lure')
        return cls(
            water_id=data.get('waterId') or "",
            caught_at=caught_at,
            catch_id=catch_id or data.get('id'),
            weight_g=_number_or_none(data.get('weightG')),
            length_cm=_number_or_none(data.get('lengthCm')),
            lure=LureOption.from_dict(lure_data) if isinstance(lure_data, dict) else None,
            method=data.get('method'),
            weather_code=_int_or_none(data.get('weatherCode')),
            weather_summary=data.get('weatherSummary'),
            temperature_c=_number_or_none(data.get('temperatureC')),
            pressure_hpa=_number_or_none(data.get('pressureHpa')),
            notes=data.get('notes'),
            user_id=data.get('userId'),
            user_name=data.get('userName'),
        )

    def to_dict(self) -> Dict[str, Any]:
        """camelCase document, as stored in Firestore and returned by the API."""
        return {
            'id': self.catch_id,
            'waterId': self.water_id,
            'caughtAt': self.caught_at.isoformat().replace('+00:00', 'Z'),
            'weightG': self.weight_g,
            'lengthCm': self.length_cm,
            'lure': self.lure.to_dict() if self.lure else None,
            'method': self.method,
            'weatherCode': self.weather_code,
            'weatherSummary': self.weather_summary,
            'temperatureC': self.temperature_c,
            'pressureHpa': self.pressure_hpa,
            'notes': self.notes,
            'userId': self.user_id,
            'userName': self.user_name,
        }

    def has_weather_data(self) -> bool:
        """Comparable for similarity scoring: at least one weather field present."""
        return (
            self.temperature_c is not None
            or self.pressure_hpa is not None
            or self.weather_code is not None
        )


def _number_or_none(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        if value is not None:
            logging.warning(f"Ignoring non-numeric value '{value}' in catch document")
        return None
    return value


def _int_or_none(value: Any) -> Optional[int]:
    number = _number_or_none(value)
    return int(number) if number is not None else None
