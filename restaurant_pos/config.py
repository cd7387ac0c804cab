import os
from dotenv import load_dotenv
from datetime import timedelta

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(basedir, '.env'))


class ConfigurationError(RuntimeError):
    """Raised at startup when the application cannot be configured."""


def engine_options_for(database_uri, timeout_seconds):
    """Push the per-request storage deadline down into the database driver."""
    if database_uri.startswith('sqlite'):
        return {'connect_args': {'timeout': timeout_seconds}}
    if database_uri.startswith('postgresql'):
        return {
            'pool_pre_ping': True,
            'connect_args': {
                'options': f"-c statement_timeout={int(timeout_seconds * 1000)}"
            },
        }
    return {'pool_pre_ping': True}


class Config:
    PROPAGATE_EXCEPTIONS = True
    API_TITLE = "Restaurant POS API"
    API_VERSION = "v1"
    OPENAPI_VERSION = "3.0.3"
    OPENAPI_URL_PREFIX = "/"
    OPENAPI_SWAGGER_UI_PATH = "/swagger-ui"
    OPENAPI_SWAGGER_UI_URL = "https://cdn.jsdelivr.net/npm/swagger-ui-dist/"
    SECRET_KEY = os.environ.get('SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'app.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(hours=168)

    # Upper bound for every storage round-trip and lock wait, in seconds
    STORAGE_TIMEOUT_SECONDS = float(os.environ.get('STORAGE_TIMEOUT_SECONDS', 100))

    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'https://kebar1.netlify.app').split(',')

    LOG_DIR = os.environ.get('LOG_DIR', os.path.join(basedir, 'logs'))
    LOG_TO_FILES = True

    # Celery Configuration
    CELERY_CONFIG = {
        'broker_url': os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0'),
        'result_backend': os.environ.get('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0'),
        'broker_transport_options': {
            'visibility_timeout': 3600
        },
        'task_serializer': 'json',
        'accept_content': ['json'],
        'result_serializer': 'json',
        'timezone': 'UTC',
        'enable_utc': True,
        'broker_connection_retry_on_startup': True,
        'beat_schedule': {
            'purge-expired-tokens': {
                'task': 'restaurant_pos.tasks.purge_expired_tokens',
                'schedule': 3600.0,
            },
        },
    }


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', 'dev-jwt-secret-key')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///dev.db')


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = False
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'  # Use in-memory SQLite database
    JWT_SECRET_KEY = 'testing-jwt-secret-key'
    STORAGE_TIMEOUT_SECONDS = 5
    LOG_TO_FILES = False
    CELERY_CONFIG = dict(Config.CELERY_CONFIG, task_always_eager=True)


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
