"""Configuration settings and environment variables.

This module loads values from environment variables (including a .env file)
and provides small helpers to safely parse integers, booleans and lists while
stripping inline comments. This avoids crashes when a .env value contains
an inline comment like:

    PORT=5000 # local dev

The helpers fall back to defaults and emit warnings when parsing fails.
"""

import os
import logging
from datetime import timedelta
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

_logger = logging.getLogger(__name__)


def _strip_inline_comment(val: str) -> str:
    """Strip an inline comment from a string and trim whitespace/quotes.

    Example: "5000 # local dev" -> "5000"
    """
    if val is None:
        return ''
    val = val.split('#', 1)[0]
    val = val.strip()
    if (val.startswith('"') and val.endswith('"')) or (
        val.startswith("'") and val.endswith("'")
    ):
        val = val[1:-1]
    return val


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    stripped = _strip_inline_comment(raw)
    return stripped if stripped != '' else default


def _get_int_env(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (ValueError, TypeError):
        _logger.warning("Invalid integer for %s: %r, falling back to %s", name, raw, default)
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = _get_env(name)
    if raw is None:
        return default
    return raw.lower() in ['true', '1', 'on', 'yes']


def _get_list_env(name: str, default: List[str]) -> List[str]:
    raw = _get_env(name)
    if raw is None:
        return list(default)
    items = [item.strip() for item in raw.split(',') if item.strip()]
    return items or list(default)


class Config:
    """Base configuration class with default settings."""

    SECRET_KEY = _get_env('SECRET_KEY')

    # JWT settings. No fallback secret: create_app refuses to start
    # without one outside testing.
    JWT_SECRET_KEY = _get_env('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=10)
    JWT_TOKEN_LOCATION = ['headers']
    JWT_HEADER_NAME = 'Authorization'
    JWT_HEADER_TYPE = 'Bearer'

    # MongoDB settings
    MONGO_URI = _get_env('MONGO_URI', 'mongodb://localhost:27017/')
    MONGO_DB = _get_env('MONGO_DB', 'foundation_admin')
    MONGO_CONNECT_ON_STARTUP = _get_bool_env('MONGO_CONNECT_ON_STARTUP', True)

    # HTTP server
    PORT = _get_int_env('PORT', 5000)

    # Logging
    LOG_LEVEL = _get_env('LOG_LEVEL', 'INFO')
    # Request audit timestamps are rendered in the foundation's local time
    AUDIT_TIMEZONE = _get_env('AUDIT_TIMEZONE', 'Asia/Kolkata')

    # Rate limiting
    RATELIMIT_ENABLED = _get_bool_env('RATELIMIT_ENABLED', True)
    RATELIMIT_STORAGE_URI = _get_env('RATELIMIT_STORAGE_URI', 'memory://')
    LOGIN_RATE_LIMIT = _get_env('LOGIN_RATE_LIMIT', '20 per minute')

    # Faculty institutes accepted by validation
    FACULTY_INSTITUTES = _get_list_env('FACULTY_INSTITUTES', ['institute1', 'institute2', 'institute3'])

    # Bootstrap superadmin used by scripts/seed_superadmin.py
    SEED_SUPERADMIN_NAME = _get_env('SEED_SUPERADMIN_NAME', 'Super Admin')
    SEED_SUPERADMIN_EMAIL = _get_env('SEED_SUPERADMIN_EMAIL', 'superadmin@example.com')
    SEED_SUPERADMIN_PASSWORD = _get_env('SEED_SUPERADMIN_PASSWORD', 'securepassword123')


class DevelopmentConfig(Config):
    """Development configuration with debug mode enabled."""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration with security settings."""
    DEBUG = False
    TESTING = False


class TestingConfig(Config):
    """Testing configuration: fixed secret, no startup DB connection."""
    TESTING = True
    JWT_SECRET_KEY = 'test-secret-key-with-at-least-32-bytes'
    MONGO_DB = 'foundation_admin_test'
    MONGO_CONNECT_ON_STARTUP = False
    RATELIMIT_ENABLED = False
    AUDIT_TIMEZONE = 'Asia/Kolkata'


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
