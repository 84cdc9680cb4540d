"""
WebPoint - Configuration
Environment-based configuration for different deployment stages
"""
import os
from datetime import timedelta


def _normalize_db_url(db_url: str) -> str:
    """Render uses postgres:// but SQLAlchemy needs postgresql+psycopg://"""
    if db_url.startswith('postgres://'):
        return db_url.replace('postgres://', 'postgresql+psycopg://', 1)
    if db_url.startswith('postgresql://'):
        return db_url.replace('postgresql://', 'postgresql+psycopg://', 1)
    return db_url


class BaseConfig:
    """Base configuration"""

    # Flask - Secret key (required in production)
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Warn if using dev key in production-like environment
    _is_production = os.environ.get('RENDER') or os.environ.get('FLASK_ENV') == 'production'
    if SECRET_KEY == 'dev-secret-key-change-in-production' and _is_production:
        import warnings
        warnings.warn("SECRET_KEY is using default dev value in production! Set SECRET_KEY env var.")

    # CORS
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """PostgreSQL when DATABASE_URL is set, SQLite otherwise"""
        db_url = os.environ.get('DATABASE_URL', '')
        if db_url:
            return _normalize_db_url(db_url)
        return 'sqlite:///webpoint.db'

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Public site
    SITE_URL = os.environ.get('SITE_URL', 'https://webpoint.md')

    # Translation (Groq, OpenAI-compatible chat completions)
    GROQ_API_KEY = os.environ.get('GROQ_API_KEY', '')
    GROQ_MODEL = os.environ.get('GROQ_MODEL', 'llama-3.3-70b-versatile')
    GROQ_API_URL = os.environ.get('GROQ_API_URL', 'https://api.groq.com/openai/v1/chat/completions')
    TRANSLATION_TIMEOUT = int(os.environ.get('TRANSLATION_TIMEOUT', '60'))

    # Image hosting (Cloudinary unsigned uploads)
    CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME', '')
    CLOUDINARY_UPLOAD_PRESET = os.environ.get('CLOUDINARY_UPLOAD_PRESET', 'webpoint_images')
    CLOUDINARY_API_KEY = os.environ.get('CLOUDINARY_API_KEY', '')

    # Email notifications
    SENDGRID_API_KEY = os.environ.get('SENDGRID_API_KEY', '')
    FROM_EMAIL = os.environ.get('FROM_EMAIL', 'onboarding@webpoint.md')
    FROM_NAME = os.environ.get('FROM_NAME', 'WebPoint')
    NOTIFY_EMAIL = os.environ.get('NOTIFY_EMAIL', 'developmentwebpoint@gmail.com')

    # Rate limiting
    RATELIMIT_ENABLED = os.environ.get('RATE_LIMIT_ENABLED', 'true').lower() == 'true'
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

    # JWT Auth
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get('JWT_EXPIRES_HOURS', '24')))

    # Uploads
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024


class DevelopmentConfig(BaseConfig):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(BaseConfig):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """Production always runs against DATABASE_URL"""
        return _normalize_db_url(os.environ.get('DATABASE_URL', ''))


class TestingConfig(BaseConfig):
    """Testing configuration"""
    DEBUG = True
    TESTING = True

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """In-memory SQLite unless TEST_DATABASE_URL is set"""
        db_url = os.environ.get('TEST_DATABASE_URL', '')
        if db_url:
            return _normalize_db_url(db_url)
        return 'sqlite:///:memory:'

    SQLALCHEMY_ENGINE_OPTIONS = {}

    RATELIMIT_ENABLED = False

    # Use test API keys
    GROQ_API_KEY = 'test-key'
    CLOUDINARY_CLOUD_NAME = 'test-cloud'
    SENDGRID_API_KEY = 'SG.test-key'
    JWT_SECRET_KEY = 'test-jwt-secret'
    SITE_URL = 'https://webpoint.test'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
