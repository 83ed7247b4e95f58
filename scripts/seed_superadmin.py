# scripts/seed_superadmin.py
"""
Seed the bootstrap superadmin account.

Creates a superadmin with the configured email and password unless an admin
with that email already exists. The script is idempotent - safe to run
multiple times.

Usage:
    python scripts/seed_superadmin.py

Requires:
    MONGO_URI, MONGO_DB, JWT_SECRET_KEY environment variables (loaded from .env file)
    SEED_SUPERADMIN_EMAIL / SEED_SUPERADMIN_PASSWORD override the defaults
"""

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Allow running as a plain script from the repository root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from backend.app import create_app, db  # noqa: E402
from backend.app.config import config  # noqa: E402
from backend.app.services.admin.admin_service import seed_superadmin  # noqa: E402

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger("seed_superadmin")


def main() -> int:
    app = create_app(config[os.environ.get("APP_ENV", "default")])
    with app.app_context():
        try:
            created = seed_superadmin(
                app.config['SEED_SUPERADMIN_EMAIL'],
                app.config['SEED_SUPERADMIN_PASSWORD'],
                name=app.config['SEED_SUPERADMIN_NAME'],
            )
        except Exception as exc:
            logger.error("Error creating superadmin: %s", exc)
            return 1
        finally:
            db.close_client(app)

    if created:
        print("[SUCCESS] Superadmin created successfully")
    else:
        print("[INFO] Superadmin already exists")
    return 0


if __name__ == "__main__":
    sys.exit(main())
