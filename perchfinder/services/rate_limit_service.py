# perchfinder/services/rate_limit_service.py
"""
Per-user sliding-window rate limiting for paid endpoints.

A counter document {count, windowStartedAtMs} per (function, user) is read and
written inside a single transaction, so concurrent requests from the same user
can never both pass the cap.
"""

import hashlib
import logging
import math
import threading
from typing import Callable, Dict, Optional, Tuple

from firebase_admin import firestore
from firebase_admin.firestore import Transaction

from perchfinder.core.errors import RateLimited
from perchfinder.models.rate_limit import RateLimitCounter, RateLimitDecision
from perchfinder.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

KEY_LENGTH = 32

# mutate(current counter or None) -> (counter to persist or None, decision)
CounterMutation = Callable[[Optional[RateLimitCounter]], Tuple[Optional[RateLimitCounter], RateLimitDecision]]


def rate_limit_key(function_name: str, uid: str, salt: str) -> str:
    """Salted, truncated SHA-256 of 'functionName:uid' (the uid never appears in storage)."""
    digest = hashlib.sha256(f"{salt}:{function_name}:{uid}".encode("utf-8")).hexdigest()
    return digest[:KEY_LENGTH]


def apply_window(counter: Optional[RateLimitCounter], now_ms: int, max_requests: int,
                 window_ms: int) -> Tuple[Optional[RateLimitCounter], RateLimitDecision]:
    """
    Decide one request against the stored counter.

    - no counter / window expired -> new window, count 1
    - count below the cap -> count + 1
    - cap reached -> rejected, nothing to persist, retry after the window's remaining time
    """
    if counter is None or now_ms - counter.window_started_at_ms >= window_ms:
        fresh = RateLimitCounter(count=1, window_started_at_ms=now_ms)
        return fresh, RateLimitDecision(allowed=True, count=1)

    if counter.count >= max_requests:
        remaining_ms = counter.window_started_at_ms + window_ms - now_ms
        retry_after = max(1, math.ceil(remaining_ms / 1000))
        return None, RateLimitDecision(allowed=False, count=counter.count, retry_after_seconds=retry_after)

    updated = RateLimitCounter(count=counter.count + 1, window_started_at_ms=counter.window_started_at_ms)
    return updated, RateLimitDecision(allowed=True, count=updated.count)


class FirestoreCounterStore:
    """Counters in the 'RateLimits' collection, updated in Firestore transactions."""

    def __init__(self, db=None, collection_name: str = 'RateLimits'):
        self.db = db or firestore.client()
        self.counters_ref = self.db.collection(collection_name)

    def update(self, key: str, mutate: CounterMutation) -> RateLimitDecision:
        doc_ref = self.counters_ref.document(key)
        transaction = self.db.transaction()

        @firestore.transactional
        def _update_in_transaction(transaction: Transaction) -> RateLimitDecision:
            snapshot = doc_ref.get(transaction=transaction)
            current = RateLimitCounter.from_dict(snapshot.to_dict()) if snapshot.exists else None
            next_counter, decision = mutate(current)
            if next_counter is not None:
                transaction.set(doc_ref, next_counter.to_dict())
            return decision

        return _update_in_transaction(transaction)


class InMemoryCounterStore:
    """Process-local counters (tests and local development)."""

    def __init__(self):
        self.counters: Dict[str, RateLimitCounter] = {}
        self._lock = threading.Lock()

    def update(self, key: str, mutate: CounterMutation) -> RateLimitDecision:
        with self._lock:
            next_counter, decision = mutate(self.counters.get(key))
            if next_counter is not None:
                self.counters[key] = next_counter
            return decision


class RateLimitService:
    """Sliding-window cap of `max_requests` per `window_hours` per user and function."""

    def __init__(self, store, max_requests: int = 10, window_hours: float = 12, salt: str = "",
                 clock: Callable[[], int] = DateTimeUtils.now_ms):
        self.store = store
        self.max_requests = max_requests
        self.window_ms = int(window_hours * 60 * 60 * 1000)
        self.salt = salt
        self.clock = clock

    def consume(self, function_name: str, uid: str) -> RateLimitDecision:
        """
        Count one request for the user.

        :raises RateLimited: the user already used every request of the current window
        """
        key = rate_limit_key(function_name, uid, self.salt)
        now_ms = self.clock()

        def _mutate(counter: Optional[RateLimitCounter]):
            return apply_window(counter, now_ms, self.max_requests, self.window_ms)

        decision = self.store.update(key, _mutate)
        if not decision.allowed:
            logger.warning(
                f"Rate limit hit for key {key} ({function_name}): "
                f"{decision.count}/{self.max_requests}, retry after {decision.retry_after_seconds}s"
            )
            raise RateLimited(decision.retry_after_seconds)

        logger.debug(f"Rate limit {key}: {decision.count}/{self.max_requests}")
        return decision
