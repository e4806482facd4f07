# perchfinder/api/lures/services.py
import logging
import re
from typing import List, Optional

from firebase_admin import firestore

from perchfinder.data.lures import DEFAULT_LURES
from perchfinder.models.catch import LureOption

logger = logging.getLogger(__name__)

# Placeholder values used by curators for "varies" entries
_VARIES = re.compile(r"varierar", re.IGNORECASE)


def has_complete_lure_info(lure: LureOption) -> bool:
    """All descriptive fields filled in, none of them a 'varierar' placeholder."""
    values = [lure.name, lure.brand, lure.category or lure.type, lure.size, lure.color]
    if any(not value or not value.strip() for value in values):
        return False
    return not any(_VARIES.search(value) for value in values)


class LureService:
    """Shared lure catalog ('Lures' collection)."""

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.lures_ref = self.db.collection('Lures')

    def list_lures(self) -> List[LureOption]:
        """Complete catalog entries; the built-in catalog when the collection is empty."""
        lures = []
        for doc in self.lures_ref.stream():
            data = doc.to_dict() or {}
            data.setdefault('id', doc.id)
            lures.append(LureOption.from_dict(data))

        if not lures:
            logger.info("Lures collection is empty, serving the built-in catalog")
            lures = list(DEFAULT_LURES)
        return [lure for lure in lures if has_complete_lure_info(lure)]

    def get_lure(self, lure_id: str) -> Optional[LureOption]:
        doc = self.lures_ref.document(lure_id).get()
        if doc.exists:
            data = doc.to_dict() or {}
            data.setdefault('id', doc.id)
            return LureOption.from_dict(data)
        return next((lure for lure in DEFAULT_LURES if lure.id == lure_id), None)
