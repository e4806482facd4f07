# perchfinder/api/waters/services.py
import logging
from typing import Any, Dict, List

from firebase_admin import firestore

from perchfinder.models.water import GeoLocation, Water, WaterRequest, user_label
from perchfinder.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


class WaterRequestService:
    """
    User-proposed waters ('FiskeVattenRequests') and their admin review.
    An approved request becomes a 'FiskeVatten' document; a handled request is deleted.
    Admins are the users with a document keyed by their uid in 'Admins'.
    """

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.requests_ref = self.db.collection('FiskeVattenRequests')
        self.waters_ref = self.db.collection('FiskeVatten')
        self.admins_ref = self.db.collection('Admins')

    def is_admin(self, uid: str) -> bool:
        if not uid:
            return False
        return self.admins_ref.document(uid).get().exists

    def list_waters(self) -> List[Water]:
        waters = [Water.from_dict(doc.id, doc.to_dict() or {}) for doc in self.waters_ref.stream()]
        waters.sort(key=lambda w: w.name.casefold())
        return waters

    def submit(self, data: Dict[str, Any], user: Dict[str, Any]) -> WaterRequest:
        """
        Store a validated WaterRequestCreateSchema body for the signed-in user.

        :param data: validated request body
        :param user: decoded ID-token claims
        """
        doc_ref = self.requests_ref.document()
        water_request = WaterRequest(
            request_id=doc_ref.id,
            name=data['name'],
            location=GeoLocation(lat=data['location']['lat'], lng=data['location']['lng']),
            requested_at=DateTimeUtils.now(),
            requested_by=user.get('uid'),
            requested_by_email=user.get('email'),
            requested_by_name=user_label(user.get('name'), user.get('email')),
        )
        doc_ref.set(water_request.to_firestore())
        logger.info(f"Water request {doc_ref.id} ('{water_request.name}') submitted by user {water_request.requested_by}")
        return water_request

    def list_pending(self) -> List[WaterRequest]:
        """Pending requests, newest first."""
        pending = [WaterRequest.from_dict(doc.id, doc.to_dict() or {}) for doc in self.requests_ref.stream()]
        pending.sort(key=lambda r: DateTimeUtils.to_timestamp_ms(r.requested_at) if r.requested_at else 0,
                     reverse=True)
        return pending

    def _get_request(self, request_id: str) -> WaterRequest:
        doc = self.requests_ref.document(request_id).get()
        if not doc.exists:
            raise FileNotFoundError(f"Water request with ID {request_id} not found.")
        return WaterRequest.from_dict(doc.id, doc.to_dict() or {})

    def approve(self, request_id: str, admin: Dict[str, Any]) -> Water:
        """
        Publish a pending request as a water, then drop the request.

        :raises FileNotFoundError: no such request
        :raises ValueError: the request has no usable location
        """
        water_request = self._get_request(request_id)
        if not water_request.name or not water_request.location:
            raise ValueError(f"Water request {request_id} has no name or location.")

        water_ref = self.waters_ref.document()
        document = water_request.to_firestore()
        document.update({
            'createdAt': firestore.SERVER_TIMESTAMP,
            'approvedAt': firestore.SERVER_TIMESTAMP,
            'approvedBy': admin.get('uid'),
            'approvedByEmail': admin.get('email'),
            'approvedByName': user_label(admin.get('name'), admin.get('email')),
        })
        water_ref.set(document)
        self.requests_ref.document(request_id).delete()
        logger.info(f"Water request {request_id} approved as water {water_ref.id} by admin {admin.get('uid')}")
        return Water(water_id=water_ref.id, name=water_request.name, location=water_request.location)

    def reject(self, request_id: str, admin: Dict[str, Any]):
        """
        :raises FileNotFoundError: no such request
        """
        self._get_request(request_id)
        self.requests_ref.document(request_id).delete()
        logger.info(f"Water request {request_id} rejected by admin {admin.get('uid')}")
