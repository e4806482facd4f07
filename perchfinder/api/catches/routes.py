# perchfinder/api/catches/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app, g
from marshmallow import ValidationError

from perchfinder.api.catches.schemas import CatchCreateSchema, CatchListSchema, CatchSchema
from perchfinder.core.errors import InvalidArgument
from perchfinder.core.security import firebase_auth_required
from perchfinder.engine.payload import compute_signature
from perchfinder.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

catches_bp = Blueprint('catches_bp', __name__)


@catches_bp.route('/<water_id>/catches', methods=['GET'])
def get_catches(water_id):
    """Catches of a water, newest first."""
    service = current_app.services['catches']
    try:
        water = service.get_water(water_id)
        catches = [catch.to_dict() for catch in service.list_for_water(water_id)]
        result = {"water": water.to_dict(), "catches": catches, "total_count": len(catches)}
        return jsonify(CatchListSchema().dump(result)), 200
    except FileNotFoundError as e:
        return jsonify({"error_code": "NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logger.error(f"Catch list lookup failed for water {water_id}: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "Kunde inte hämta fångster."}), 500


@catches_bp.route('/<water_id>/catches', methods=['POST'])
@firebase_auth_required
def create_catch(water_id):
    """Log a catch for the signed-in user."""
    json_data = request.get_json(silent=True)
    if not isinstance(json_data, dict):
        return jsonify({"error_code": "INVALID_INPUT", "message": "Request body must be a JSON object."}), 400

    try:
        data = CatchCreateSchema().load(json_data)
    except ValidationError as err:
        return jsonify({"error_code": "INVALID_INPUT", "message": "Invalid input data.", "details": err.messages}), 400

    service = current_app.services['catches']
    try:
        record = service.add_catch(water_id, data, g.user)
        return jsonify({"catch": CatchSchema().dump(record.to_dict())}), 201
    except FileNotFoundError as e:
        return jsonify({"error_code": "NOT_FOUND", "message": str(e)}), 404
    except InvalidArgument as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Saving catch for water {water_id} failed: {e}", exc_info=True)
        return jsonify({"error_code": "SAVE_FAILED", "message": "Kunde inte spara fångsten."}), 500


@catches_bp.route('/<water_id>/stats', methods=['GET'])
def get_water_stats(water_id):
    """Aggregated statistics of a water, with its signature for cache comparison."""
    service = current_app.services['catches']
    tz = DateTimeUtils.get_timezone(current_app.config.get('LOCAL_TIMEZONE'))
    try:
        payload = service.build_stats(water_id, tz)
    except FileNotFoundError as e:
        return jsonify({"error_code": "NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logger.error(f"Stats computation failed for water {water_id}: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "Kunde inte beräkna statistik."}), 500

    if payload is None:
        return jsonify({"stats": None, "signature": None}), 200
    return jsonify({"stats": payload.to_dict(), "signature": compute_signature(payload)}), 200
