"""Initialize database tables"""
import logging

from stylesnap.db.base import Base
from stylesnap.db import session

# Register every model on the metadata before create_all
import stylesnap.models  # noqa: F401

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create all database tables"""
    try:
        Base.metadata.create_all(bind=session.engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        raise
