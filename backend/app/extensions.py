"""Flask extensions initialization (JWT, Limiter)."""
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize Flask extensions
limiter = Limiter(
    key_func=get_remote_address,
    headers_enabled=True,
)
jwt = JWTManager()


def init_extensions(app):
    """Initialize Flask extensions with app context.

    Args:
        app: Flask application instance
    """
    jwt.init_app(app)
    limiter.init_app(app)
