import logging

from planvault.core.config import get_settings
from planvault.storage import DatabaseStorage


def init_db():
    """Create all database tables for the configured DATABASE_URL"""
    settings = get_settings()
    if not settings.uses_database:
        raise SystemExit("DATABASE_URL is not set; the in-memory backend needs no tables")
    DatabaseStorage.from_url(settings.database_url, echo=settings.db_echo).init()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
