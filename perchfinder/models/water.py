# perchfinder/models/water.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any

from perchfinder.utils.datetime_utils import DateTimeUtils


def user_label(name: Optional[str], email: Optional[str]) -> str:
    """Display name, else the local part of the email address."""
    trimmed = (name or "").strip()
    if trimmed:
        return trimmed
    if not email:
        return "Okänd användare"
    return email.split("@")[0] or email


@dataclass
class GeoLocation:
    lat: float
    lng: float

    @classmethod
    def from_dict(cls, data: Any) -> Optional["GeoLocation"]:
        if not isinstance(data, dict):
            return None
        lat, lng = data.get('lat'), data.get('lng')
        if isinstance(lat, bool) or isinstance(lng, bool):
            return None
        if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
            return None
        return cls(lat=lat, lng=lng)

    def to_dict(self) -> Dict[str, float]:
        return {'lat': self.lat, 'lng': self.lng}


@dataclass
class Water:
    """Firestore 'FiskeVatten' collection document: an approved fishing water."""
    water_id: str
    name: str
    location: Optional[GeoLocation] = None

    @classmethod
    def from_dict(cls, water_id: str, data: Dict[str, Any]) -> "Water":
        return cls(
            water_id=water_id,
            name=data.get('name') or "Okänt vatten",
            location=GeoLocation.from_dict(data.get('location')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.water_id,
            'name': self.name,
            'location': self.location.to_dict() if self.location else None,
        }


@dataclass
class WaterRequest:
    """Firestore 'FiskeVattenRequests' document: a user-proposed water awaiting admin review."""
    request_id: str
    name: str
    location: Optional[GeoLocation] = None
    requested_at: Optional[datetime] = None
    requested_by: Optional[str] = None
    requested_by_email: Optional[str] = None
    requested_by_name: Optional[str] = None

    @classmethod
    def from_dict(cls, request_id: str, data: Dict[str, Any]) -> "WaterRequest":
        requested_at = data.get('requestedAt')
        return cls(
            request_id=request_id,
            name=data.get('name') or "",
            location=GeoLocation.from_dict(data.get('location')),
            requested_at=requested_at if isinstance(requested_at, datetime) else None,
            requested_by=data.get('requestedBy'),
            requested_by_email=data.get('requestedByEmail'),
            requested_by_name=data.get('requestedByName'),
        )

    def to_firestore(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'location': self.location.to_dict() if self.location else None,
            'requestedAt': self.requested_at,
            'requestedBy': self.requested_by,
            'requestedByEmail': self.requested_by_email,
            'requestedByName': self.requested_by_name,
        }

    def to_dict(self) -> Dict[str, Any]:
        body = self.to_firestore()
        body['id'] = self.request_id
        body['requestedAt'] = DateTimeUtils.to_iso_string(self.requested_at) if self.requested_at else None
        return body
