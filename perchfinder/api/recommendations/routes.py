# perchfinder/api/recommendations/routes.py
"""
Advice endpoint

POST /  body {stats: WaterStatsPayload}, `Authorization: Bearer <Firebase ID token>`
- 200 {recommendation}
- 400 invalid body, 401 unauthenticated / email not verified, 403 origin not allowed,
  405 wrong method, 413 body too large, 429 rate limited (Retry-After), 500 model failure
OPTIONS /  CORS preflight, 204 for allow-listed origins
"""

import logging
from flask import Blueprint, request, jsonify, current_app
from werkzeug.exceptions import RequestEntityTooLarge

from perchfinder.api.recommendations.schemas import AdviceResponseSchema
from perchfinder.core.errors import (
    EmailNotVerified, InvalidArgument, OriginNotAllowed, PayloadTooLarge, RateLimited,
    Unauthenticated, UpstreamFailure
)
from perchfinder.core.security import (
    apply_cors_headers, authenticate_request, is_origin_allowed, verify_app_check
)

logger = logging.getLogger(__name__)

recommendations_bp = Blueprint('recommendations_bp', __name__)


@recommendations_bp.after_request
def add_cors_headers(response):
    return apply_cors_headers(response)


def _error(err):
    return jsonify(err.to_dict()), err.status_code


def _generation_failed(detail: str):
    return jsonify({"error": "Error generating recommendation", "detail": detail}), 500


@recommendations_bp.route('/', methods=['POST', 'OPTIONS'])
def get_water_recommendation():
    """Validate, authenticate and rate-limit, then return AI advice for a water's statistics."""
    origin = request.headers.get('Origin')
    if origin and not is_origin_allowed(origin, current_app.config['ALLOWED_ORIGINS']):
        logger.warning(f"Advice request from disallowed origin: {origin}")
        return _error(OriginNotAllowed())

    if request.method == 'OPTIONS':
        return '', 204

    # Size guard before anything is parsed
    max_bytes = current_app.config['ADVICE_MAX_BODY_BYTES']
    if request.content_length is not None and request.content_length > max_bytes:
        return _error(PayloadTooLarge())
    try:
        body = request.get_data(cache=True)
    except RequestEntityTooLarge:
        return _error(PayloadTooLarge())
    if len(body) > max_bytes:
        return _error(PayloadTooLarge())

    try:
        user = authenticate_request()
        verify_app_check(current_app.config['APP_CHECK_REQUIRED'])
    except (Unauthenticated, EmailNotVerified) as e:
        return _error(e)

    service = current_app.services['advice']
    try:
        stats = service.validate_request(request.get_json(silent=True))
        recommendation = service.generate_advice(user['uid'], stats)
    except InvalidArgument as e:
        return _error(e)
    except RateLimited as e:
        response = jsonify(e.to_dict())
        response.status_code = e.status_code
        response.headers['Retry-After'] = str(e.retry_after_seconds)
        return response
    except UpstreamFailure as e:
        return _generation_failed(e.message)
    except Exception as e:
        logger.error(f"Advice generation failed for user {user.get('uid')}: {e}", exc_info=True)
        return _generation_failed(str(e))

    return jsonify(AdviceResponseSchema().dump({"recommendation": recommendation})), 200
