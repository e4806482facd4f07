# perchfinder/api/lures/routes.py
import logging
from flask import Blueprint, jsonify, current_app

from perchfinder.api.lures.schemas import LureListSchema

logger = logging.getLogger(__name__)

lures_bp = Blueprint('lures_bp', __name__)


@lures_bp.route('', methods=['GET'])
def get_lures():
    """Shared lure catalog."""
    service = current_app.services['lures']
    try:
        lures = [lure.to_dict() for lure in service.list_lures()]
        return jsonify(LureListSchema().dump({"lures": lures, "total_count": len(lures)})), 200
    except Exception as e:
        logger.error(f"Lure catalog lookup failed: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "Kunde inte hämta beten."}), 500
