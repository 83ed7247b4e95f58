"""Database connection and utility functions for MongoDB.

This module provides a centralized MongoDB client with connection management,
error handling, and index setup for the admin and faculty collections.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from pymongo import ASCENDING, MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError
from flask import current_app

logger = logging.getLogger(__name__)

ADMINS_COLLECTION = 'admins'
FACULTY_COLLECTION = 'faculty'


class DatabaseError(Exception):
    """Custom exception for database-related errors."""
    pass


@dataclass
class ConnectionState:
    """Outcome of the startup connection attempt, handed to the health check."""

    connected: bool = False
    error: Optional[str] = None

    def mark_connected(self) -> None:
        self.connected = True
        self.error = None

    def mark_failed(self, error: str) -> None:
        self.connected = False
        self.error = error


def get_mongo_client() -> MongoClient:
    """Get or create the application's MongoDB client.

    The client owns its connection pool and is shared by every request
    served by this application instance.

    Returns:
        MongoClient: Configured MongoDB client instance
    """
    client = current_app.extensions.get('mongo_client')
    if client is None:
        client = MongoClient(
            current_app.config['MONGO_URI'],
            serverSelectionTimeoutMS=5000,  # 5 second timeout
            connectTimeoutMS=10000,         # 10 second connection timeout
            socketTimeoutMS=20000,          # 20 second socket timeout
            maxPoolSize=50,
            retryWrites=False,
        )
        current_app.extensions['mongo_client'] = client
    return client


def get_db():
    """Get database instance for the current application."""
    client = get_mongo_client()
    return client[current_app.config['MONGO_DB']]


def ping() -> None:
    """Round-trip to the server.

    Raises:
        DatabaseError: If the server cannot be reached
    """
    try:
        get_mongo_client().admin.command('ping')
    except (ConnectionFailure, ServerSelectionTimeoutError) as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        raise DatabaseError(f"Database connection failed: {e}")
    except PyMongoError as e:
        logger.error(f"Unexpected error connecting to MongoDB: {e}")
        raise DatabaseError(f"Unexpected database error: {e}")


def close_client(app) -> None:
    client = app.extensions.pop('mongo_client', None)
    if client is not None:
        client.close()
        logger.debug("Database client closed")


def init_app(app, state: ConnectionState) -> None:
    """Connect to MongoDB at startup and record the outcome in ``state``.

    The application is allowed to start even when the database is
    unavailable; the health endpoint reports the failure.

    Args:
        app: Flask application instance
        state: Connection state shared with the health check
    """
    if not app.config.get('MONGO_CONNECT_ON_STARTUP', True):
        logger.debug("Skipping MongoDB connection at startup")
        return

    with app.app_context():
        try:
            ping()
            state.mark_connected()
            logger.info("MongoDB connected (database=%s)", app.config['MONGO_DB'])
        except DatabaseError as e:
            state.mark_failed(str(e))
            logger.error(f"Database initialization failed: {e}")
            return

        ensure_indexes()


def ensure_indexes() -> bool:
    """Ensure unique email indexes and lookup indexes exist.

    Returns:
        bool: True if all indexes were created/verified successfully
    """
    try:
        database = get_db()

        admins = database[ADMINS_COLLECTION]
        admins.create_index([('email', ASCENDING)], name='uq_email', unique=True)
        admins.create_index([('role', ASCENDING)], name='idx_role')

        faculty = database[FACULTY_COLLECTION]
        faculty.create_index([('email', ASCENDING)], name='uq_email', unique=True)
        faculty.create_index([('institute', ASCENDING)], name='idx_institute')

        logger.info("Database indexes created/verified successfully")
        return True

    except PyMongoError as e:
        logger.error(f"Failed to create indexes: {e}")
        return False
