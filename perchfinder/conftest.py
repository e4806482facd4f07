# perchfinder/conftest.py
"""
Shared pytest fixtures: an in-memory Firestore stand-in, a testing app with
injected services, and a patched Firebase ID-token verifier.
"""

import itertools
from unittest.mock import MagicMock

import pytest

from perchfinder import create_app
from perchfinder.api.catches.services import CatchService
from perchfinder.api.lures.services import LureService
from perchfinder.api.recommendations.services import AdviceService
from perchfinder.api.waters.services import WaterRequestService
from perchfinder.core.errors import UpstreamFailure
from perchfinder.services.notification_service import CatchSavedNotifier
from perchfinder.services.rate_limit_service import InMemoryCounterStore, RateLimitService

VALID_TOKEN = "valid-token"
UNVERIFIED_TOKEN = "unverified-token"


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def get(self, transaction=None):
        return FakeSnapshot(self.id, self._collection.docs.get(self.id))

    def set(self, data):
        self._collection.docs[self.id] = dict(data)

    def delete(self):
        self._collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, field, value):
        self._collection = collection
        self._field = field
        self._value = value

    def stream(self):
        for doc_id, data in list(self._collection.docs.items()):
            if data.get(self._field) == self._value:
                yield FakeSnapshot(doc_id, data)


class FakeCollection:
    _ids = itertools.count(1)

    def __init__(self):
        self.docs = {}

    def document(self, doc_id=None):
        return FakeDocument(self, doc_id or f"auto-{next(self._ids)}")

    def where(self, field, op, value):
        assert op == '=='
        return FakeQuery(self, field, value)

    def stream(self):
        for doc_id, data in list(self.docs.items()):
            yield FakeSnapshot(doc_id, data)


class FakeFirestore:
    """Just enough of the Firestore client for the catch, lure and water request services."""

    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection())


class FakeOpenAIService:
    def __init__(self, reply="Fiska med jigg på morgonen."):
        self.reply = reply
        self.calls = []
        self.fail = False

    def generate_water_advice(self, payload):
        self.calls.append(payload)
        if self.fail:
            raise UpstreamFailure("model unavailable")
        return self.reply


@pytest.fixture
def fake_db():
    db = FakeFirestore()
    db.collection('FiskeVatten').docs['brunnsviken'] = {
        'name': 'Brunnsviken',
        'location': {'lat': 59.36, 'lng': 18.05},
    }
    return db


@pytest.fixture
def notifier():
    return CatchSavedNotifier()


@pytest.fixture
def weather_service():
    service = MagicMock()
    service.get_current_conditions.return_value = None
    return service


@pytest.fixture
def fake_openai():
    return FakeOpenAIService()


@pytest.fixture
def app(fake_db, notifier, weather_service, fake_openai):
    rate_limit = RateLimitService(InMemoryCounterStore(), max_requests=10, window_hours=12, salt="test-salt")
    lures = LureService(db=fake_db)
    services = {
        'openai': fake_openai,
        'notifications': notifier,
        'weather': weather_service,
        'rate_limit': rate_limit,
        'advice': AdviceService(fake_openai, rate_limit),
        'lures': lures,
        'catches': CatchService(db=fake_db, lure_service=lures, weather_service=weather_service,
                                notifier=notifier),
        'water_requests': WaterRequestService(db=fake_db),
    }
    return create_app('testing', services=services)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def verify_id_token(monkeypatch):
    """Accepts VALID_TOKEN (verified email) and UNVERIFIED_TOKEN; everything else is rejected."""
    from perchfinder.core import security

    def _verify(token):
        if token == VALID_TOKEN:
            return {'uid': 'user-1', 'email': 'anna@example.se', 'email_verified': True, 'name': 'Anna'}
        if token == UNVERIFIED_TOKEN:
            return {'uid': 'user-2', 'email': 'bo@example.se', 'email_verified': False}
        raise ValueError("bad token")

    monkeypatch.setattr(security.firebase_auth, 'verify_id_token', _verify)
    return _verify


@pytest.fixture
def auth_headers(verify_id_token):
    return {'Authorization': f'Bearer {VALID_TOKEN}', 'Origin': 'http://localhost:5173'}
