"""
Flask application factory.

This module implements the application factory pattern for creating
Flask application instances with different configurations.
"""

from flask import Flask
from decouple import config
import os

from .extensions import db, migrate, limiter
from .config import get_config, build_engine_options


def create_app(config_name=None):
    """
    Application factory function.

    Args:
        config_name: Configuration name (development, testing, production)
                    If None, determined from environment

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Apply ProxyFix for correct IP and scheme handling behind reverse proxies
    from werkzeug.middleware.proxy_fix import ProxyFix
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # Load configuration
    env_name = config_name or config('FLASK_ENV', default='development')
    config_class = get_config(env_name, validate=(env_name == 'production'))
    app.config.from_object(config_class)
    app.config['ENV_NAME'] = env_name

    # Ensure instance directory exists
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    os.makedirs(os.path.join(basedir, "instance"), exist_ok=True)

    # Update database URI to use absolute path
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///instance/'):
        db_name = app.config['SQLALCHEMY_DATABASE_URI'][len('sqlite:///instance/'):]
        app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{os.path.join(basedir, "instance", db_name)}'

    # Every storage call is bounded by STORAGE_TIMEOUT_SECONDS
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = build_engine_options(
        app.config['SQLALCHEMY_DATABASE_URI'],
        app.config['STORAGE_TIMEOUT_SECONDS'],
        config_class
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Enable foreign key constraints for SQLite
    from sqlalchemy import event
    from sqlalchemy.engine import Engine

    @event.listens_for(Engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Enable foreign key constraints for SQLite connections"""
        if 'sqlite' in str(dbapi_conn):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    # Configure logging and error handling
    from maintplan.error_handlers import setup_logging, register_error_handlers
    setup_logging(app)
    register_error_handlers(app)

    # Initialize database models
    from maintplan.models import init_models, model_registry
    models = init_models(db)

    # Initialize model registry
    model_registry.init_app(app)
    model_registry.register(models)

    register_blueprints(app)

    app.logger.info(f"maintplan started ({app.config['ENV_NAME']})")
    return app


def register_blueprints(app):
    """Register all Flask blueprints."""
    from maintplan.routes import health_bp, schedule_bp, shifts_bp, executions_bp

    app.register_blueprint(health_bp)
    # Probes are polled by orchestrators and must never be throttled
    limiter.exempt(health_bp)

    app.register_blueprint(schedule_bp)
    app.register_blueprint(shifts_bp)
    app.register_blueprint(executions_bp)


def init_db(app):
    """Initialize the database."""
    with app.app_context():
        db.create_all()
