"""Flask application factory and initialization."""
import logging
from typing import Optional

from flask import Flask
from werkzeug.exceptions import HTTPException

from backend.app.config import Config
from backend.app.extensions import init_extensions
from backend.app import db
from backend.app.db import ConnectionState
from backend.app.middleware.request_logging import init_request_logging
from backend.app.responses import format_response

logger = logging.getLogger(__name__)

SERVICE_NAME = "Foundation Management API System"


def create_app(config_class=Config, connection_state: Optional[ConnectionState] = None):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use
        connection_state: Database connection state reported by the health
            check; a fresh one is created and filled at startup when omitted

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.config.get("JWT_SECRET_KEY") and not app.config.get("TESTING"):
        raise RuntimeError("JWT_SECRET_KEY must be set to sign admin tokens")

    configure_logging(app)

    # Initialize Flask extensions
    init_extensions(app)

    state = connection_state if connection_state is not None else ConnectionState()
    if connection_state is None:
        db.init_app(app, state)

    init_request_logging(app)
    register_health_routes(app, state)
    register_error_handlers(app)
    register_blueprints(app)

    @app.after_request
    def after_request(response):
        """Add CORS headers to all responses."""
        response.headers['Access-Control-Allow-Origin'] = '*'
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
        return response

    return app


def configure_logging(app):
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s %(message)s')
    app.logger.setLevel(level)


def register_health_routes(app, state: ConnectionState):
    """Register the root and /api/health endpoints reporting ``state``."""

    def health_check():
        if not state.connected:
            return format_response(
                500,
                "Database Connection Failed",
                details=state.error or "MongoDB is not connected",
            )
        return format_response(200, SERVICE_NAME, data={
            "status": "online",
            "database": "connected",
            "services": {
                "authentication": "active",
                "cors": "enabled",
                "api": "ready",
            },
        })

    app.add_url_rule('/', endpoint='health_root', view_func=health_check, methods=['GET'])
    app.add_url_rule('/api/health', endpoint='health_check', view_func=health_check, methods=['GET'])


def register_error_handlers(app):
    """Answer framework-level errors (404, 405, 429, 500) with the envelope."""

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return format_response(error.code or 500, error.name, details=error.description)

    @app.errorhandler(Exception)
    def handle_unexpected_exception(error):
        logger.exception("Unhandled error")
        return format_response(500, "Internal server error", details=str(error))


def register_blueprints(app):
    """Register Flask blueprints with the application.

    Args:
        app: Flask application instance
    """
    # Import API blueprints here to avoid circular imports
    from backend.app.blueprints.api.admin.routes import admin_bp
    from backend.app.blueprints.api.faculty.routes import faculty_bp

    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(faculty_bp, url_prefix='/api/faculty')
