# perchfinder/__init__.py

# =====================================================================================
# 1. Environment (loaded before the config module reads it)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. Module imports
# =====================================================================================
import os
import logging
from typing import Any, Dict, Optional
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials

# - Config
from perchfinder.core.config import config_by_name
from perchfinder.core.errors import PerchfinderError

# - API blueprints
from perchfinder.api.recommendations.routes import recommendations_bp
from perchfinder.api.catches.routes import catches_bp
from perchfinder.api.lures.routes import lures_bp
from perchfinder.api.waters.routes import waters_bp

# - Services
from perchfinder.services.notification_service import catch_saved_notifier
from perchfinder.services.openai_service import OpenAIService
from perchfinder.services.rate_limit_service import RateLimitService, FirestoreCounterStore
from perchfinder.services.weather_service import WeatherService
from perchfinder.api.recommendations.services import AdviceService
from perchfinder.api.catches.services import CatchService
from perchfinder.api.lures.services import LureService
from perchfinder.api.waters.services import WaterRequestService


def _build_services(app: Flask) -> Dict[str, Any]:
    services: Dict[str, Any] = {}

    # Shared services first
    try:
        openai_instance = OpenAIService()
        openai_instance.init_app(app)
        services['openai'] = openai_instance
        logging.info("OpenAI service initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize OpenAI service: {e}")
        raise

    services['notifications'] = catch_saved_notifier
    services['weather'] = WeatherService.from_config(app.config)
    services['rate_limit'] = RateLimitService(
        FirestoreCounterStore(),
        max_requests=app.config['RATE_LIMIT_MAX_REQUESTS'],
        window_hours=app.config['RATE_LIMIT_WINDOW_HOURS'],
        salt=app.config['RATE_LIMIT_SALT'],
    )

    # Domain services with injected dependencies
    services['advice'] = AdviceService(
        openai_service=services['openai'],
        rate_limit_service=services['rate_limit'],
        function_name=app.config['RATE_LIMIT_FUNCTION_NAME'],
    )
    services['lures'] = LureService()
    services['catches'] = CatchService(
        lure_service=services['lures'],
        weather_service=services['weather'],
        notifier=services['notifications'],
    )
    services['water_requests'] = WaterRequestService()
    return services


def create_app(config_name: Optional[str] = None, services: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Flask application factory.

    :param config_name: key of config_by_name; FLASK_ENV when omitted
    :param services: prebuilt services (tests); Firebase is not initialised when given
    """
    # =====================================================================================
    # 3. App and config
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. External services
    # =====================================================================================
    if services is None:
        if not firebase_admin._apps:
            cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
            if cred_path:
                if not os.path.exists(cred_path):
                    raise FileNotFoundError(f"Firebase credentials file not found: {cred_path}")
                firebase_admin.initialize_app(credentials.Certificate(cred_path))
            else:
                # Application default credentials (Cloud Run, emulator)
                firebase_admin.initialize_app()

        # =================================================================================
        # 5. Service instances on 'app.services' (dependency injection)
        # =================================================================================
        services = _build_services(app)

    app.services = services

    # =====================================================================================
    # 6. Blueprints
    # =====================================================================================
    app.register_blueprint(recommendations_bp, url_prefix='')
    app.register_blueprint(catches_bp, url_prefix='/api/waters')
    app.register_blueprint(waters_bp, url_prefix='/api/waters')
    app.register_blueprint(lures_bp, url_prefix='/api/lures')

    # =====================================================================================
    # 7. Global error handlers
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(PerchfinderError)
    def handle_perchfinder_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        response = {"error_code": err.name.upper().replace(' ', '_'), "message": err.description}
        return jsonify(response), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "Ett oväntat serverfel inträffade."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. Logging
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
