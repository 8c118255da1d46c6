"""
Configuration management for the maintenance scheduler
Handles environment-based settings and scheduling defaults

Uses a lazy validation pattern so development and testing run without
production secrets.
"""
import secrets
from decouple import config
from typing import Optional

from maintplan.error_handlers.exceptions import ConfigurationException


class Config:
    """Base configuration class"""
    # Flask settings
    # Development: Generate random key on startup (non-persistent OK for dev)
    SECRET_KEY = config('SECRET_KEY', default=secrets.token_hex(32))
    SQLALCHEMY_DATABASE_URI = config('DATABASE_URL', default='sqlite:///instance/maintplan.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # Storage bound (seconds) for every execution read/write
    STORAGE_TIMEOUT_SECONDS = config('STORAGE_TIMEOUT_SECONDS', default=5, cast=int)

    # Scheduling defaults, overridable per request
    SCHEDULE_DEFAULT_BUFFER_MINUTES = config('SCHEDULE_DEFAULT_BUFFER_MINUTES', default=0, cast=int)
    SCHEDULE_DEFAULT_GROUP_BY_MACHINE = config('SCHEDULE_DEFAULT_GROUP_BY_MACHINE', default=False, cast=bool)
    SCHEDULE_DEFAULT_PRIORITIZE_MANDATORY = config('SCHEDULE_DEFAULT_PRIORITIZE_MANDATORY', default=True, cast=bool)
    SCHEDULE_DEFAULT_PREFER_PERSON_IN_CHARGE = config('SCHEDULE_DEFAULT_PREFER_PERSON_IN_CHARGE', default=True, cast=bool)
    SCHEDULE_DEFAULT_TASK_MINUTES = config('SCHEDULE_DEFAULT_TASK_MINUTES', default=15, cast=int)

    # Logging settings
    LOG_LEVEL = config('LOG_LEVEL', default='INFO')
    LOG_FILE = config('LOG_FILE', default='logs/maintplan.log')

    # Rate limiting
    RATELIMIT_ENABLED = config('RATELIMIT_ENABLED', default=True, cast=bool)
    RATELIMIT_DEFAULT = config('RATELIMIT_DEFAULT', default='600 per hour')
    RATELIMIT_STORAGE_URI = config('RATELIMIT_STORAGE_URI', default='memory://')

    @classmethod
    def validate(cls) -> None:
        """
        Validate configuration - can be called explicitly or on-demand

        Raises:
            ConfigurationException: If required configuration is missing
        """
        pass  # Base config has no required validation


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    RATELIMIT_ENABLED = False
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    # Session Security
    SESSION_COOKIE_SECURE = config('SESSION_COOKIE_SECURE', default=True, cast=bool)
    SESSION_COOKIE_HTTPONLY = config('SESSION_COOKIE_HTTPONLY', default=True, cast=bool)

    # Database Connection Pool (for production databases)
    DB_POOL_SIZE = config('DB_POOL_SIZE', default=10, cast=int)
    DB_POOL_RECYCLE = config('DB_POOL_RECYCLE', default=3600, cast=int)
    DB_MAX_OVERFLOW = config('DB_MAX_OVERFLOW', default=20, cast=int)

    # Logging
    LOG_LEVEL = config('LOG_LEVEL', default='WARNING')

    @classmethod
    def validate(cls) -> None:
        """
        Production mode: validate all required settings

        Raises:
            ConfigurationException: If any required configuration is missing
        """
        secret_key = config('SECRET_KEY', default='')
        if len(secret_key) < 32:
            raise ConfigurationException(
                "SECRET_KEY must be set to at least 32 characters in production. "
                "Generate a secure key with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )

        if cls.STORAGE_TIMEOUT_SECONDS <= 0:
            raise ConfigurationException('STORAGE_TIMEOUT_SECONDS must be positive')


# Configuration mapping
config_mapping = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: Optional[str] = None, validate: bool = False) -> type:
    """
    Get configuration class based on environment.

    Args:
        config_name: Environment name ('development', 'testing', 'production')
        validate: Whether to validate configuration immediately (default: False)

    Returns:
        Config class for the specified environment

    Raises:
        ConfigurationException: If validation is enabled and required variables are missing

    Example:
        >>> config = get_config()
        >>> config = get_config('production', validate=True)
    """
    if config_name is None:
        config_name = config('FLASK_ENV', default='development')

    config_class = config_mapping.get(config_name, DevelopmentConfig)

    if validate:
        config_class.validate()

    return config_class


def build_engine_options(database_uri: str, timeout_seconds: int, config_class: type) -> dict:
    """
    SQLAlchemy engine options that bound every storage call.

    SQLite gets a busy timeout on the connection; pooled databases get a
    pool checkout timeout and a per-statement timeout where supported.

    Args:
        database_uri: SQLAlchemy database URI
        timeout_seconds: Upper bound for a single storage call
        config_class: Active configuration class

    Returns:
        dict suitable for SQLALCHEMY_ENGINE_OPTIONS
    """
    if database_uri.startswith('sqlite'):
        return {'connect_args': {'timeout': timeout_seconds}}

    options = {
        'pool_pre_ping': True,
        'pool_timeout': timeout_seconds,
    }
    if hasattr(config_class, 'DB_POOL_SIZE'):
        options.update({
            'pool_size': config_class.DB_POOL_SIZE,
            'pool_recycle': config_class.DB_POOL_RECYCLE,
            'max_overflow': config_class.DB_MAX_OVERFLOW,
        })
    if database_uri.startswith('postgresql'):
        options['connect_args'] = {
            'connect_timeout': timeout_seconds,
            'options': f'-c statement_timeout={timeout_seconds * 1000}',
        }
    return options
