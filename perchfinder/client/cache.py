# perchfinder/client/cache.py
import json
import logging
import re
from pathlib import Path
from typing import Callable, Optional, Union

from perchfinder.models.recommendation import CachedRecommendation
from perchfinder.services.notification_service import CatchSavedNotifier
from perchfinder.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "perchfinder:water-reco:"


def cache_key(water_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}{water_id}"


class RecommendationCache:
    """
    Per-water advice cache in a local directory, one JSON file per key.

    Reads never raise: a missing, unreadable or malformed entry is a miss.
    """

    def __init__(self, cache_dir: Union[str, Path]):
        self.cache_dir = Path(cache_dir).expanduser()

    def _path(self, water_id: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", cache_key(water_id))
        return self.cache_dir / f"{safe_key}.json"

    def read(self, water_id: str) -> Optional[CachedRecommendation]:
        if not water_id:
            return None
        path = self._path(water_id)
        if not path.exists():
            return None
        try:
            return CachedRecommendation.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable cached recommendation for water {water_id}: {e}")
            return None

    def write(self, water_id: str, signature: str, recommendation: str) -> Optional[CachedRecommendation]:
        """Overwrite the entry for a water. A failed write is logged, not raised."""
        if not water_id:
            return None
        entry = CachedRecommendation(
            signature=signature,
            recommendation=recommendation,
            saved_at=DateTimeUtils.to_iso_string(DateTimeUtils.now()),
        )
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self._path(water_id).write_text(json.dumps(entry.to_dict(), ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not store recommendation for water {water_id}: {e}")
            return None
        return entry

    def invalidate(self, water_id: str):
        if not water_id:
            return
        try:
            self._path(water_id).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove cached recommendation for water {water_id}: {e}")

    def listen_to(self, notifier: CatchSavedNotifier) -> Callable[[], None]:
        """Drop a water's entry whenever a catch is saved there. Returns the unsubscribe function."""
        return notifier.subscribe(self.invalidate)
