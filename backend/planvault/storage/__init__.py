import logging

from planvault.core.config import Settings
from planvault.storage.base import Storage, session_is_live
from planvault.storage.database import DatabaseStorage
from planvault.storage.memory import MemStorage

logger = logging.getLogger(__name__)


def build_storage(settings: Settings) -> Storage:
    """Pick the storage backend once, at startup."""
    if settings.uses_database:
        logger.info("Using database storage")
        return DatabaseStorage.from_url(settings.database_url, echo=settings.db_echo)
    logger.info("DATABASE_URL not set, using in-memory storage")
    return MemStorage()


__all__ = ["Storage", "DatabaseStorage", "MemStorage", "build_storage", "session_is_live"]
