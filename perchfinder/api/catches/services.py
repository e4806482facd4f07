# perchfinder/api/catches/services.py
import logging
from datetime import tzinfo
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from perchfinder.api.lures.services import LureService
from perchfinder.core.errors import InvalidArgument
from perchfinder.engine import labels
from perchfinder.engine.payload import build_water_stats_payload
from perchfinder.models.catch import CatchRecord
from perchfinder.models.recommendation import WaterStatsPayload
from perchfinder.models.water import Water
from perchfinder.services.notification_service import CatchSavedNotifier
from perchfinder.services.weather_service import WeatherService
from perchfinder.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


class CatchService:
    """
    Catch log of a water ('Fangster' collection) and the waters themselves
    ('FiskeVatten' collection).
    """

    def __init__(self, db=None, lure_service: Optional[LureService] = None,
                 weather_service: Optional[WeatherService] = None,
                 notifier: Optional[CatchSavedNotifier] = None):
        self.db = db or firestore.client()
        self.catches_ref = self.db.collection('Fangster')
        self.waters_ref = self.db.collection('FiskeVatten')
        self.lure_service = lure_service or LureService(self.db)
        self.weather_service = weather_service
        self.notifier = notifier

    def get_water(self, water_id: str) -> Water:
        """
        :raises FileNotFoundError: no such water
        """
        doc = self.waters_ref.document(water_id).get()
        if not doc.exists:
            raise FileNotFoundError(f"Water with ID {water_id} not found.")
        return Water.from_dict(doc.id, doc.to_dict() or {})

    def list_for_water(self, water_id: str) -> List[CatchRecord]:
        """
        Every readable catch of a water, newest first.
        Documents with an unparseable caughtAt are skipped.
        """
        catches = []
        for doc in self.catches_ref.where('waterId', '==', water_id).stream():
            try:
                catches.append(CatchRecord.from_dict(doc.to_dict() or {}, catch_id=doc.id))
            except ValueError as e:
                logger.warning(f"Skipping catch {doc.id} of water {water_id}: {e}")
        catches.sort(key=lambda c: DateTimeUtils.to_timestamp_ms(c.caught_at), reverse=True)
        return catches

    def add_catch(self, water_id: str, data: Dict[str, Any], user: Dict[str, Any]) -> CatchRecord:
        """
        Store a validated CatchCreateSchema body for the signed-in user.

        :param water_id: target water
        :param data: validated request body
        :param user: decoded ID-token claims
        :raises FileNotFoundError: no such water
        :raises InvalidArgument: unknown lure id
        """
        water = self.get_water(water_id)

        lure = None
        if data.get('lureId'):
            lure = self.lure_service.get_lure(data['lureId'])
            if lure is None:
                raise InvalidArgument(f"Okänt bete: {data['lureId']}")
        # Retrieve methods only make sense for jig lures
        method = data.get('method') if labels.is_jig_lure(lure) else None

        record = CatchRecord(
            water_id=water_id,
            caught_at=DateTimeUtils.parse_wall_clock(data['caughtAt']),
            weight_g=data.get('weightG'),
            length_cm=data.get('lengthCm'),
            lure=lure,
            method=method,
            weather_code=data.get('weatherCode'),
            weather_summary=data.get('weatherSummary'),
            temperature_c=data.get('temperatureC'),
            pressure_hpa=data.get('pressureHpa'),
            notes=data.get('notes'),
            user_id=user.get('uid'),
            user_name=user.get('name') or user.get('email'),
        )
        if not record.has_weather_data():
            self._attach_weather_snapshot(record, water)

        doc_ref = self.catches_ref.document()
        record.catch_id = doc_ref.id
        document = record.to_dict()
        document['createdAt'] = firestore.SERVER_TIMESTAMP
        doc_ref.set(document)
        logger.info(f"Catch {record.catch_id} saved for water {water_id} by user {record.user_id}")

        if self.notifier:
            self.notifier.publish(water_id)
        return record

    def _attach_weather_snapshot(self, record: CatchRecord, water: Water):
        if not self.weather_service or not water.location:
            return
        current = self.weather_service.get_current_conditions(water.location.lat, water.location.lng)
        if current is None:
            return
        record.weather_code = current.weather_code
        record.weather_summary = current.weather_summary
        record.temperature_c = current.temperature_c
        record.pressure_hpa = current.pressure_hpa

    def build_stats(self, water_id: str, tz: Optional[tzinfo] = None) -> Optional[WaterStatsPayload]:
        """
        Server-side WaterStatsPayload for a water, live weather included when available.

        :raises FileNotFoundError: no such water
        """
        water = self.get_water(water_id)
        catches = self.list_for_water(water_id)
        current = None
        if catches and self.weather_service and water.location:
            current = self.weather_service.get_current_conditions(water.location.lat, water.location.lng)
        return build_water_stats_payload(catches, water.name, current, tz)
