# perchfinder/api/waters/routes.py
import logging
from functools import wraps
from flask import Blueprint, request, jsonify, current_app, g
from marshmallow import ValidationError

from perchfinder.api.catches.schemas import WaterSchema
from perchfinder.api.waters.schemas import WaterRequestCreateSchema, WaterRequestSchema
from perchfinder.core.errors import Forbidden
from perchfinder.core.security import firebase_auth_required

logger = logging.getLogger(__name__)

waters_bp = Blueprint('waters_bp', __name__)


def admin_required(f):
    """Route decorator, applied under firebase_auth_required: the user must be listed in 'Admins'."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        uid = g.user.get('uid')
        if not current_app.services['water_requests'].is_admin(uid):
            logger.warning(f"Non-admin user {uid} tried to reach {request.path}")
            err = Forbidden()
            return jsonify(err.to_dict()), err.status_code
        return f(*args, **kwargs)

    return decorated_function


@waters_bp.route('', methods=['GET'])
def get_waters():
    """Approved waters sorted by name."""
    service = current_app.services['water_requests']
    try:
        waters = [water.to_dict() for water in service.list_waters()]
        return jsonify({"waters": WaterSchema(many=True).dump(waters)}), 200
    except Exception as e:
        logger.error(f"Water list lookup failed: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "Kunde inte hämta vattenlistan just nu."}), 500


@waters_bp.route('/requests', methods=['POST'])
@firebase_auth_required
def create_water_request():
    """Propose a new water; it stays hidden until an admin approves it."""
    json_data = request.get_json(silent=True)
    if not isinstance(json_data, dict):
        return jsonify({"error_code": "INVALID_INPUT", "message": "Request body must be a JSON object."}), 400

    try:
        data = WaterRequestCreateSchema().load(json_data)
    except ValidationError as err:
        return jsonify({"error_code": "INVALID_INPUT",
                        "message": "Fyll i namn och markera en plats på kartan.",
                        "details": err.messages}), 400

    try:
        water_request = current_app.services['water_requests'].submit(data, g.user)
        return jsonify({"request": WaterRequestSchema().dump(water_request.to_dict())}), 201
    except Exception as e:
        logger.error(f"Saving water request failed: {e}", exc_info=True)
        return jsonify({"error_code": "SAVE_FAILED", "message": "Kunde inte skicka förfrågan."}), 500


@waters_bp.route('/requests', methods=['GET'])
@firebase_auth_required
@admin_required
def get_water_requests():
    """Pending water requests, newest first (admins only)."""
    service = current_app.services['water_requests']
    try:
        pending = [water_request.to_dict() for water_request in service.list_pending()]
        return jsonify({"requests": WaterRequestSchema(many=True).dump(pending)}), 200
    except Exception as e:
        logger.error(f"Water request lookup failed: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "Kunde inte hämta förfrågningar."}), 500


@waters_bp.route('/requests/<request_id>/approve', methods=['POST'])
@firebase_auth_required
@admin_required
def approve_water_request(request_id):
    service = current_app.services['water_requests']
    try:
        water = service.approve(request_id, g.user)
        return jsonify({"water": WaterSchema().dump(water.to_dict())}), 201
    except FileNotFoundError as e:
        return jsonify({"error_code": "NOT_FOUND", "message": str(e)}), 404
    except ValueError as e:
        return jsonify({"error_code": "INVALID_REQUEST", "message": str(e)}), 409
    except Exception as e:
        logger.error(f"Approving water request {request_id} failed: {e}", exc_info=True)
        return jsonify({"error_code": "SAVE_FAILED", "message": "Kunde inte godkänna förfrågan. Försök igen."}), 500


@waters_bp.route('/requests/<request_id>/reject', methods=['POST'])
@firebase_auth_required
@admin_required
def reject_water_request(request_id):
    service = current_app.services['water_requests']
    try:
        service.reject(request_id, g.user)
        return '', 204
    except FileNotFoundError as e:
        return jsonify({"error_code": "NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logger.error(f"Rejecting water request {request_id} failed: {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "message": "Kunde inte avslå förfrågan. Försök igen."}), 500
