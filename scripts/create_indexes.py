# scripts/create_indexes.py
"""
Create MongoDB indexes for the admin and faculty collections.

- Unique index on admin email
- Index on admin role (superadmin counting)
- Unique index on faculty email
- Index on faculty institute

The script is idempotent - safe to run multiple times.

Usage:
    python scripts/create_indexes.py

Requires:
    MONGO_URI, MONGO_DB environment variables (loaded from .env file)
"""

import os
from pymongo import MongoClient, ASCENDING
from pymongo.database import Database
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def get_db() -> Database:
    mongo_uri = os.environ.get('MONGO_URI')
    mongo_db = os.environ.get('MONGO_DB')
    if not mongo_uri or not mongo_db:
        raise ValueError("MONGO_URI and MONGO_DB environment variables must be set")
    client = MongoClient(mongo_uri)
    return client[mongo_db]


def create_indexes():
    """Create all required database indexes."""
    db = get_db()

    print("[INFO] Creating indexes...")

    print("[INDEXES] admins collection")
    db.admins.create_index([("email", ASCENDING)], name="uq_email", unique=True)
    print("  ✓ Created unique index on admin email")
    db.admins.create_index([("role", ASCENDING)], name="idx_role")
    print("  ✓ Created index on admin role")

    print("[INDEXES] faculty collection")
    db.faculty.create_index([("email", ASCENDING)], name="uq_email", unique=True)
    print("  ✓ Created unique index on faculty email")
    db.faculty.create_index([("institute", ASCENDING)], name="idx_institute")
    print("  ✓ Created index on faculty institute")

    print("[SUCCESS] All indexes created successfully!")


if __name__ == "__main__":
    create_indexes()
