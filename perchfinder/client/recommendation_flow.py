# perchfinder/client/recommendation_flow.py
import logging
from datetime import tzinfo
from typing import List, Optional

import requests

from perchfinder.client.cache import RecommendationCache
from perchfinder.client.catches_client import CatchesApiClient
from perchfinder.client.requester import RecommendationRequester
from perchfinder.engine.payload import build_water_stats_payload, compute_signature
from perchfinder.models.catch import CatchRecord
from perchfinder.models.recommendation import WaterStatsPayload
from perchfinder.services.notification_service import CatchSavedNotifier
from perchfinder.services.weather_service import WeatherService

logger = logging.getLogger(__name__)


class WaterRecommendationFlow:
    """
    Recommendation panel of one water.

    refresh() rebuilds the statistics payload and adopts the cached advice when
    its signature still matches; otherwise the cache entry is dropped and the
    user may request new advice. A "catch saved" event for the water drops the
    cache entry and rebuilds.
    """

    def __init__(self, water_id: str, catches_client: CatchesApiClient,
                 cache: RecommendationCache, requester: RecommendationRequester,
                 weather_service: Optional[WeatherService] = None,
                 notifier: Optional[CatchSavedNotifier] = None, tz: Optional[tzinfo] = None):
        self.water_id = water_id
        self.catches_client = catches_client
        self.cache = cache
        self.requester = requester
        self.weather_service = weather_service
        self.tz = tz

        self.catches: Optional[List[CatchRecord]] = None
        self.payload: Optional[WaterStatsPayload] = None
        self.signature: Optional[str] = None
        self.has_cached_recommendation = False
        self.load_error: Optional[str] = None

        self._unsubscribe = notifier.subscribe(self.handle_catch_saved) if notifier else None

    def refresh(self):
        try:
            water, catches = self.catches_client.fetch_water_catches(self.water_id)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Loading catches for water {self.water_id} failed: {e}", exc_info=True)
            self.load_error = "Kunde inte hämta fångster."
            return
        self.load_error = None
        self.catches = catches

        current = None
        if catches and self.weather_service and water.location:
            current = self.weather_service.get_current_conditions(water.location.lat, water.location.lng)

        self.payload = build_water_stats_payload(catches, water.name, current, self.tz)
        if self.payload is None:
            self.signature = None
            self._drop_cached()
            return

        self.signature = compute_signature(self.payload)
        cached = self.cache.read(self.water_id)
        if cached and cached.signature == self.signature:
            self.requester.set_cached_recommendation(cached.recommendation)
            self.has_cached_recommendation = True
            return
        self._drop_cached()

    def _drop_cached(self):
        self.cache.invalidate(self.water_id)
        self.has_cached_recommendation = False
        self.requester.reset()

    def can_request(self) -> bool:
        return (
            self.payload is not None
            and not self.has_cached_recommendation
            and not self.requester.is_loading
        )

    def request_recommendation(self) -> Optional[str]:
        """Fetch advice for the current payload and cache it under the payload's signature."""
        if not self.can_request():
            return None
        payload, signature = self.payload, self.signature
        text = self.requester.fetch_recommendation(payload)
        if text is None:
            return None
        self.cache.write(self.water_id, signature, text)
        self.has_cached_recommendation = True
        return text

    def handle_catch_saved(self, water_id: str):
        if water_id != self.water_id:
            return
        logger.info(f"New catch on water {water_id}, dropping cached advice")
        self._drop_cached()
        self.refresh()

    def close(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def summary_text(self) -> str:
        if self.catches is None:
            return "Laddar fångster..."
        if self.payload is None:
            return "Registrera en fångst för att få rekommendation."
        return f"Baserat på {self.payload.total_catches} fångster."

    @property
    def recommendation_text(self) -> str:
        if self.requester.is_loading:
            return "Hämtar rekommendation..."
        if self.requester.recommendation is not None:
            return self.requester.recommendation or "Ingen rekommendation än."
        if self.catches is None:
            return "Väntar på fångster..."
        if self.payload is None:
            return "Registrera en fångst för att få rekommendation."
        return "Klicka på \"Få rekommendation!\" för att hämta en."
