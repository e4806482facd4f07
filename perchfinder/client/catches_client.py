# perchfinder/client/catches_client.py
import logging
from typing import List, Optional, Tuple

import requests

from perchfinder.models.catch import CatchRecord
from perchfinder.models.water import Water

logger = logging.getLogger(__name__)


class CatchesApiClient:
    """Reads a water and its catch log from GET /api/waters/<water_id>/catches."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_water_catches(self, water_id: str) -> Tuple[Water, List[CatchRecord]]:
        """
        :raises requests.RequestException: network or HTTP failure
        """
        response = self.session.get(f"{self.base_url}/api/waters/{water_id}/catches", timeout=self.timeout)
        response.raise_for_status()
        body = response.json()

        water_data = body.get('water') or {}
        water = Water.from_dict(water_data.get('id') or water_id, water_data)
        catches = []
        for item in body.get('catches') or []:
            try:
                catches.append(CatchRecord.from_dict(item))
            except ValueError as e:
                logger.warning(f"Skipping unreadable catch {item.get('id')}: {e}")
        return water, catches
