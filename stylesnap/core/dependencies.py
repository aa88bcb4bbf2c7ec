"""FastAPI dependencies"""
from typing import Generator

from stylesnap.db import session


def get_db() -> Generator:
    """
    Database session dependency
    Yields a database session and ensures it's closed after use
    """
    db = session.SessionLocal()
    try:
        yield db
    finally:
        db.close()
