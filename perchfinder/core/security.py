# perchfinder/core/security.py
import logging
from functools import wraps
from typing import Iterable, Optional
from flask import request, jsonify, g, current_app
from firebase_admin import auth as firebase_auth
from firebase_admin import app_check

from perchfinder.core.errors import Unauthenticated, EmailNotVerified

logger = logging.getLogger(__name__)

APP_CHECK_HEADER = "X-Firebase-AppCheck"
CORS_ALLOWED_HEADERS = f"Content-Type, Authorization, {APP_CHECK_HEADER}"
CORS_ALLOWED_METHODS = "POST, OPTIONS"


def _bearer_token() -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[len("Bearer "):].strip()
    return token or None


def authenticate_request() -> dict:
    """
    Verify the Firebase ID token sent as a bearer credential.

    :return: decoded token claims (uid, email, email_verified, ...)
    :raises Unauthenticated: header missing or token rejected by Firebase
    :raises EmailNotVerified: valid token for a user without a verified email
    """
    token = _bearer_token()
    if not token:
        raise Unauthenticated("Authorization header is missing or invalid")

    try:
        decoded = firebase_auth.verify_id_token(token)
    except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError,
            firebase_auth.RevokedIdTokenError, firebase_auth.CertificateFetchError) as e:
        logger.warning(f"ID token rejected: {type(e).__name__}")
        raise Unauthenticated("Invalid or expired token")

    if not decoded.get("email_verified"):
        logger.info(f"Request from unverified user {decoded.get('uid')}")
        raise EmailNotVerified()

    g.user = decoded
    return decoded


def verify_app_check(required: bool) -> Optional[dict]:
    """
    Verify the optional App Check attestation token.
    A present token is always verified; absence only fails when `required`.
    """
    token = request.headers.get(APP_CHECK_HEADER)
    if not token:
        if required:
            raise Unauthenticated("App Check token is missing")
        return None
    try:
        return app_check.verify_token(token)
    except Exception as e:
        logger.warning(f"App Check token rejected: {e}")
        raise Unauthenticated("Invalid App Check token")


def firebase_auth_required(f):
    """Route decorator: Firebase ID token with verified email required."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            authenticate_request()
        except (Unauthenticated, EmailNotVerified) as e:
            return jsonify(e.to_dict()), e.status_code
        return f(*args, **kwargs)

    return decorated_function


def is_origin_allowed(origin: Optional[str], allowed_origins: Iterable[str]) -> bool:
    return bool(origin) and origin in set(allowed_origins)


def apply_cors_headers(response):
    """Echo Access-Control-Allow-Origin only for allow-listed origins."""
    origin = request.headers.get("Origin")
    if is_origin_allowed(origin, current_app.config["ALLOWED_ORIGINS"]):
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOWED_HEADERS
        response.headers["Access-Control-Allow-Methods"] = CORS_ALLOWED_METHODS
        response.headers["Access-Control-Expose-Headers"] = "Retry-After"
        response.headers["Vary"] = "Origin"
    return response
