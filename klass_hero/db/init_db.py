# klass_hero/db/init_db.py
"""Database initialization utilities."""
import logging

from klass_hero.db.base import Base, import_models
from klass_hero.db.session import engine

logger = logging.getLogger(__name__)


def init_db(bind=None) -> None:
    """
    Create all tables that do not exist yet.

    Note: This is suitable for development/testing only.
    For production, use migrations instead.
    """
    bind = bind or engine
    try:
        import_models()
        Base.metadata.create_all(bind=bind)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


def drop_db(bind=None) -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data! Only for development/testing purposes.
    """
    bind = bind or engine
    Base.metadata.drop_all(bind=bind)
    logger.warning("All database tables dropped")
