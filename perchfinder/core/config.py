# perchfinder/core/config.py

import os


def _env_list(name: str, default: str = "") -> list:
    """Comma separated environment variable -> list of non-empty values."""
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Settings shared by every environment. Values come from the environment / .env file."""
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    # Web API key of the Firebase project, used by the client for ID-token refresh.
    FIREBASE_WEB_API_KEY = os.getenv('FIREBASE_WEB_API_KEY')

    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY') or os.getenv('OPENAI_KEY')
    OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4.1-mini')
    OPENAI_TEMPERATURE = 0.5

    # Advice endpoint guards
    ALLOWED_ORIGINS = _env_list(
        'ALLOWED_ORIGINS',
        'https://perchfinder.web.app,https://perchfinder.firebaseapp.com,http://localhost:5173'
    )
    ADVICE_MAX_BODY_BYTES = int(os.getenv('ADVICE_MAX_BODY_BYTES', 25000))
    # Werkzeug caps the read stream here, also for bodies sent without Content-Length.
    # One byte over the advice limit so an oversized body is seen rather than truncated.
    MAX_CONTENT_LENGTH = ADVICE_MAX_BODY_BYTES + 1
    APP_CHECK_REQUIRED = _env_bool('APP_CHECK_REQUIRED', False)

    # Sliding window: at most N advice calls per user per window
    RATE_LIMIT_FUNCTION_NAME = 'getWaterRecommendation'
    RATE_LIMIT_MAX_REQUESTS = int(os.getenv('RATE_LIMIT_MAX_REQUESTS', 10))
    RATE_LIMIT_WINDOW_HOURS = float(os.getenv('RATE_LIMIT_WINDOW_HOURS', 12))
    RATE_LIMIT_SALT = os.getenv('RATE_LIMIT_SALT', 'perchfinder')

    # Weather lookup (Open-Meteo, no key)
    WEATHER_API_URL = os.getenv('WEATHER_API_URL', 'https://api.open-meteo.com/v1/forecast')
    WEATHER_TIMEOUT_SECONDS = float(os.getenv('WEATHER_TIMEOUT_SECONDS', 10))

    # Client side
    ADVICE_ENDPOINT_URL = os.getenv('ADVICE_ENDPOINT_URL', 'http://127.0.0.1:5000/')
    ADVICE_TIMEOUT_SECONDS = float(os.getenv('ADVICE_TIMEOUT_SECONDS', 60))
    RECOMMENDATION_CACHE_DIR = os.getenv('RECOMMENDATION_CACHE_DIR', os.path.expanduser('~/.perchfinder'))
    LOCAL_TIMEZONE = os.getenv('LOCAL_TIMEZONE', 'Europe/Stockholm')


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    """Test settings: Firebase is never initialised, services are injected by the tests."""
    TESTING = True
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = None
    OPENAI_API_KEY = 'test-key'
    ALLOWED_ORIGINS = ['http://localhost:5173']
    APP_CHECK_REQUIRED = False
    RATE_LIMIT_SALT = 'test-salt'
    LOCAL_TIMEZONE = 'UTC'


config_by_name = dict(
    development=DevelopmentConfig,
    production=ProductionConfig,
    testing=TestingConfig
)
