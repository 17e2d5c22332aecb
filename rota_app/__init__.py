"""
Flask application factory.

This module implements the application factory pattern for creating
Flask application instances with different configurations.
"""

from flask import Flask, request
from flask_wtf.csrf import generate_csrf
import os

from .extensions import db, migrate, csrf, limiter
from .config import get_config
from .error_handlers.exceptions import ConfigurationException


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
    try:
        config_class = get_config(config_name, validate=(config_name == 'production'))
    except ValueError as e:
        raise ConfigurationException(str(e)) from e
    app.config.from_object(config_class)

    # Ensure instance directory exists
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    os.makedirs(os.path.join(basedir, "instance"), exist_ok=True)

    # Update database URI to use absolute path
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///instance/'):
        db_name = app.config['SQLALCHEMY_DATABASE_URI'].rsplit('/', 1)[-1]
        app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{os.path.join(basedir, "instance", db_name)}'

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
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
    from rota_app.error_handlers import setup_logging, register_error_handlers
    setup_logging(app)
    register_error_handlers(app)

    # Initialize database models
    from rota_app.models import init_models, model_registry
    models = init_models(db)

    # Initialize model registry
    model_registry.init_app(app)
    model_registry.register(models)

    # Register blueprints
    register_blueprints(app)

    # Setup request/response handlers
    setup_request_handlers(app)

    app.logger.info(f"Rota service created with {config_class.__name__}")

    return app


def register_blueprints(app):
    """Register all Flask blueprints."""

    from rota_app.routes import rota_bp, health_bp

    app.register_blueprint(rota_bp)
    app.register_blueprint(health_bp)

    # Health probes are not rate limited
    limiter.exempt(health_bp)


def setup_request_handlers(app):
    """Setup request and response handlers."""

    @app.after_request
    def add_csrf_token_cookie(response):
        """
        Add CSRF token to cookie for AJAX requests.

        The rota planner reads the token and sends it back in the
        X-CSRFToken header on POST requests.
        """
        if not app.config.get('WTF_CSRF_ENABLED', True):
            return response
        if request.endpoint and not request.endpoint.startswith('health'):
            response.set_cookie(
                'csrf_token',
                generate_csrf(),
                secure=app.config.get('SESSION_COOKIE_SECURE', False),
                httponly=False,
                samesite='Lax'
            )
        return response


def init_db(app):
    """Initialize the database."""
    with app.app_context():
        db.create_all()
