# perchfinder/client/requester.py
"""
Client for the advice endpoint.

RecommendationRequester is a small state machine (IDLE -> LOADING -> SUCCESS | ERROR)
around one POST to the advice backend. Every request gets a generation number;
a response that arrives after a newer request or a reset() is dropped.
"""

import enum
import logging
import threading
from typing import Any, Callable, Dict, Optional, Union

import requests

from perchfinder.client.token_provider import FirebaseUserSession
from perchfinder.core.errors import (
    EmailNotVerified, PerchfinderError, RateLimited, RequestFailed, Unauthenticated
)
from perchfinder.core.security import APP_CHECK_HEADER
from perchfinder.models.recommendation import WaterStatsPayload

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Kunde inte hämta rekommendation just nu."


class RecommendationState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


def user_message(error: PerchfinderError) -> str:
    """Short Swedish text shown to the user for a failed request."""
    if isinstance(error, EmailNotVerified):
        return "Verifiera din e-postadress för att få rekommendationer."
    if isinstance(error, Unauthenticated):
        return "Du måste vara inloggad för att få rekommendationer."
    if isinstance(error, RateLimited):
        minutes = max(1, -(-error.retry_after_seconds // 60))
        return f"För många AI-anrop. Försök igen om {minutes} min."
    return DEFAULT_ERROR_MESSAGE


def _retry_after(response: requests.Response) -> int:
    header = response.headers.get("Retry-After")
    try:
        return max(0, int(header))
    except (TypeError, ValueError):
        pass
    try:
        return max(0, int(response.json().get("retry_after_seconds", 0)))
    except (ValueError, TypeError, AttributeError):
        return 0


def _error_code(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("error_code") if isinstance(body, dict) else None


class RecommendationRequester:
    """
    :param endpoint_url: advice endpoint
    :param user_provider: returns the signed-in user, or None when signed out
    :param app_check_token_provider: optional, returns an App Check token or None
    """

    def __init__(self, endpoint_url: str,
                 user_provider: Callable[[], Optional[FirebaseUserSession]],
                 app_check_token_provider: Optional[Callable[[], Optional[str]]] = None,
                 session: Optional[requests.Session] = None, timeout: float = 60.0):
        self.endpoint_url = endpoint_url
        self.user_provider = user_provider
        self.app_check_token_provider = app_check_token_provider
        self.session = session or requests.Session()
        self.timeout = timeout

        self.state = RecommendationState.IDLE
        self.recommendation: Optional[str] = None
        self.error: Optional[PerchfinderError] = None
        self.error_message: Optional[str] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def is_loading(self) -> bool:
        return self.state is RecommendationState.LOADING

    def _next_generation(self, state: RecommendationState) -> int:
        with self._lock:
            self._generation += 1
            self.state = state
            self.error = None
            self.error_message = None
            return self._generation

    def reset(self):
        """Back to IDLE; an in-flight response is discarded."""
        self._next_generation(RecommendationState.IDLE)
        self.recommendation = None

    def set_cached_recommendation(self, text: str):
        self._next_generation(RecommendationState.SUCCESS)
        self.recommendation = text

    def fetch_recommendation(self, payload: Union[WaterStatsPayload, Dict[str, Any]]) -> Optional[str]:
        """
        POST the payload to the advice endpoint.

        :return: the advice text, or None on failure or when superseded
        """
        generation = self._next_generation(RecommendationState.LOADING)
        try:
            text = self._post(payload)
        except PerchfinderError as e:
            logger.warning(f"Advice request failed: {type(e).__name__}: {e.message}")
            self._fail(generation, e)
            return None
        except Exception as e:
            logger.error(f"Unexpected advice request failure: {e}", exc_info=True)
            self._fail(generation, RequestFailed())
            return None

        with self._lock:
            if generation != self._generation:
                logger.debug(f"Discarding stale advice response (generation {generation})")
                return None
            self.state = RecommendationState.SUCCESS
            self.recommendation = text
        return text

    def _fail(self, generation: int, error: PerchfinderError):
        with self._lock:
            if generation != self._generation:
                return
            self.state = RecommendationState.ERROR
            self.error = error
            self.error_message = user_message(error)

    def _post(self, payload: Union[WaterStatsPayload, Dict[str, Any]]) -> str:
        user = self.user_provider()
        if user is None:
            raise Unauthenticated()
        if not user.email_verified:
            # The claim may predate verification: re-check on a fresh token
            user.get_id_token(force_refresh=True)
            if not user.email_verified:
                raise EmailNotVerified()

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {user.get_id_token()}",
        }
        if self.app_check_token_provider:
            app_check_token = self.app_check_token_provider()
            if app_check_token:
                headers[APP_CHECK_HEADER] = app_check_token

        stats = payload.to_dict() if isinstance(payload, WaterStatsPayload) else payload
        try:
            response = self.session.post(self.endpoint_url, json={"stats": stats},
                                         headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Advice endpoint unreachable: {e}", exc_info=True)
            raise RequestFailed()

        if response.status_code == 401:
            if _error_code(response) == EmailNotVerified.error_code:
                raise EmailNotVerified()
            raise Unauthenticated()
        if response.status_code == 429:
            raise RateLimited(_retry_after(response))
        if not response.ok:
            raise RequestFailed(response.status_code)

        try:
            body = response.json()
        except ValueError:
            raise RequestFailed(response.status_code)
        recommendation = body.get("recommendation") if isinstance(body, dict) else None
        return recommendation if isinstance(recommendation, str) else ""
