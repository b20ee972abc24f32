"""
Persistence adapters for the goal snapshot.

Every adapter stores one blob (the whole serialized collection) under one
fixed key. Reads return None when nothing has been saved yet; failures are
raised as PersistenceError.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from ...errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "bucketListItems"


class PersistenceAdapter(ABC):
    """Key-value blob store bound to a single key."""

    key: str = DEFAULT_STORAGE_KEY

    @abstractmethod
    def read(self) -> Optional[str]:
        """Return the stored blob, or None if nothing was saved."""

    @abstractmethod
    def write(self, blob: str) -> None:
        """Replace the stored blob. All-or-nothing."""


class MemoryPersistence(PersistenceAdapter):
    """Dict-backed store. Used for tests and throwaway sessions."""

    def __init__(self, key: str = DEFAULT_STORAGE_KEY, initial: Optional[str] = None):
        self.key = key
        self._data: Dict[str, str] = {}
        if initial is not None:
            self._data[key] = initial
        self.write_count = 0

    def read(self) -> Optional[str]:
        return self._data.get(self.key)

    def write(self, blob: str) -> None:
        self._data[self.key] = blob
        self.write_count += 1


class SqlitePersistence(PersistenceAdapter):
    """Stores the snapshot in a small key/value table in a SQLite database."""

    def __init__(self, db_path: str = "data/bucket_list.db", key: str = DEFAULT_STORAGE_KEY):
        self.db_path = Path(db_path)
        self.key = key
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_database()
        except (OSError, sqlite3.Error) as e:
            raise PersistenceError(f"Could not open database {self.db_path}: {e}") from e

    @contextmanager
    def _get_connection(self):
        """Context manager for safe database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self):
        """Create the key/value table if it doesn't exist."""
        with self._get_connection() as conn:
            conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT
                )
            """)

    def read(self) -> Optional[str]:
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (self.key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read '{self.key}': {e}") from e
        return row["value"] if row else None

    def write(self, blob: str) -> None:
        try:
            with self._get_connection() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                    (self.key, blob, datetime.now().isoformat()),
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to write '{self.key}': {e}") from e


class JsonFilePersistence(PersistenceAdapter):
    """Stores the snapshot as a JSON file, replaced atomically on every write."""

    def __init__(self, path: str = "data/bucket_list.json", key: str = DEFAULT_STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e

    def write(self, blob: str) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(blob, encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            logger.warning("Could not save snapshot to %s: %s", self.path, e)
            tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e
