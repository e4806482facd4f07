# perchfinder/client/token_provider.py
import logging
import time
from typing import Any, Callable, Dict, Optional

import jwt
import requests

from perchfinder.core.errors import Unauthenticated

logger = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
REFRESH_URL = "https://securetoken.googleapis.com/v1/token"
# Refresh this many seconds before the ID token expires
EXPIRY_MARGIN_SECONDS = 300


def decode_claims(id_token: str) -> Dict[str, Any]:
    """
    Read the claims of a Firebase ID token without verifying it.
    Verification is the backend's job; the client only needs exp/uid.

    :raises Unauthenticated: not a JWT
    """
    try:
        return jwt.decode(id_token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise Unauthenticated(f"Malformed ID token: {e}")


class FirebaseUserSession:
    """
    Signed-in Firebase user on the client side.
    Keeps the ID token fresh through the Secure Token REST API.
    """

    def __init__(self, api_key: str, id_token: str, refresh_token: str,
                 session: Optional[requests.Session] = None, timeout: float = 10.0,
                 clock: Callable[[], float] = time.time):
        self.api_key = api_key
        self.refresh_token = refresh_token
        self.session = session or requests.Session()
        self.timeout = timeout
        self.clock = clock
        self._set_id_token(id_token)

    def _set_id_token(self, id_token: str):
        self.id_token = id_token
        self.claims = decode_claims(id_token)

    @classmethod
    def sign_in_with_password(cls, api_key: str, email: str, password: str,
                              session: Optional[requests.Session] = None) -> "FirebaseUserSession":
        """
        Email/password sign-in.

        :raises Unauthenticated: wrong credentials or the sign-in call failed
        """
        session = session or requests.Session()
        try:
            response = session.post(
                SIGN_IN_URL,
                params={"key": api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=10,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Sign-in failed for {email}: {e}")
            raise Unauthenticated("Inloggningen misslyckades.")
        if not isinstance(data, dict) or not data.get("idToken") or not data.get("refreshToken"):
            raise Unauthenticated("Inloggningen misslyckades.")
        return cls(api_key, data["idToken"], data["refreshToken"], session=session)

    @property
    def uid(self) -> Optional[str]:
        return self.claims.get("user_id") or self.claims.get("sub")

    @property
    def email_verified(self) -> bool:
        return bool(self.claims.get("email_verified"))

    def _expires_soon(self) -> bool:
        exp = self.claims.get("exp")
        if not isinstance(exp, (int, float)):
            return True
        return exp - EXPIRY_MARGIN_SECONDS <= self.clock()

    def refresh(self):
        """
        Exchange the refresh token for a new ID token.

        :raises Unauthenticated: refresh token revoked or the call failed
        """
        try:
            response = self.session.post(
                REFRESH_URL,
                params={"key": self.api_key},
                data={"grant_type": "refresh_token", "refresh_token": self.refresh_token},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"ID token refresh failed for user {self.uid}: {e}")
            raise Unauthenticated("Sessionen har gått ut. Logga in igen.")

        id_token = data.get("id_token") if isinstance(data, dict) else None
        if not id_token:
            logger.warning(f"ID token refresh for user {self.uid} returned no id_token")
            raise Unauthenticated("Sessionen har gått ut. Logga in igen.")
        self.refresh_token = data.get("refresh_token", self.refresh_token)
        self._set_id_token(id_token)
        logger.debug(f"ID token refreshed for user {self.uid}")

    def get_id_token(self, force_refresh: bool = False) -> str:
        """Current ID token, refreshed first when forced or close to expiry."""
        if force_refresh or self._expires_soon():
            self.refresh()
        return self.id_token
