"""Client-side key/value stores holding the trial identity copies

Both stores mirror browser storage semantics: reads of a missing key give
None, and a failed read or write is logged and reported, never raised.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Union

from sqlalchemy import Column, MetaData, String, Table, create_engine, select
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class LocalStorage:
    """Small JSON file store; stand-in for the browser's localStorage"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._load().get(key)
        except (OSError, ValueError) as e:
            logger.warning(f"LocalStorage read failed for {key}: {str(e)}")
            return None
        return value if isinstance(value, str) and value else None

    def set(self, key: str, value: str) -> bool:
        try:
            data = self._load()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            return True
        except (OSError, ValueError) as e:
            logger.warning(f"LocalStorage write failed for {key}: {str(e)}")
            return False


class EmbeddedStore:
    """
    SQLite key/value table; stand-in for the browser's IndexedDB store.
    """

    def __init__(self, url: str = "sqlite:///stylesnap_client.db", table_name: str = "store"):
        self.engine = create_engine(url)
        self.metadata = MetaData()
        self.table = Table(
            table_name,
            self.metadata,
            Column("key", String(255), primary_key=True),
            Column("value", String, nullable=True),
        )
        self._ready = False

    def _ensure_table(self) -> None:
        if not self._ready:
            self.metadata.create_all(self.engine)
            self._ready = True

    def get(self, key: str) -> Optional[str]:
        try:
            self._ensure_table()
            with self.engine.connect() as conn:
                value = conn.execute(select(self.table.c.value).where(self.table.c.key == key)).scalar()
        except SQLAlchemyError as e:
            logger.warning(f"EmbeddedStore read failed for {key}: {str(e)}")
            return None
        return value or None

    def set(self, key: str, value: str) -> bool:
        try:
            self._ensure_table()
            with self.engine.begin() as conn:
                conn.execute(self.table.delete().where(self.table.c.key == key))
                conn.execute(self.table.insert().values(key=key, value=value))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"EmbeddedStore write failed for {key}: {str(e)}")
            return False
