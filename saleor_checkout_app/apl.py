"""Auth persistence layer (APL): credential stores keyed by Saleor API URL."""

import json
import sqlite3
from abc import ABC, abstractmethod
from typing import Optional, List

from .config import APLConfig
from .models.saleor_models import AuthData


class BaseAPL(ABC):
    """Abstract APL interface."""

    @abstractmethod
    def get(self, saleor_api_url: str) -> Optional[AuthData]:
        """Get auth data for a Saleor API URL."""

    @abstractmethod
    def set(self, auth_data: AuthData) -> None:
        """Store auth data, replacing any previous entry for its API URL."""

    @abstractmethod
    def delete(self, saleor_api_url: str) -> None:
        """Remove auth data for a Saleor API URL."""

    @abstractmethod
    def get_all(self) -> List[AuthData]:
        """Return all stored auth data."""


class InMemoryAPL(BaseAPL):
    """In-memory APL for development/testing."""

    def __init__(self):
        self._store: dict[str, AuthData] = {}

    def get(self, saleor_api_url: str) -> Optional[AuthData]:
        return self._store.get(saleor_api_url)

    def set(self, auth_data: AuthData) -> None:
        self._store[auth_data.saleor_api_url] = auth_data

    def delete(self, saleor_api_url: str) -> None:
        self._store.pop(saleor_api_url, None)

    def get_all(self) -> List[AuthData]:
        return list(self._store.values())


class SQLiteAPL(BaseAPL):
    """SQLite-based APL so installations survive restarts."""

    def __init__(self, db_path: str = "apl.db"):
        self.db_path = db_path
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._init_db()

    def _init_db(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS auth_data (
                saleor_api_url TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    def get(self, saleor_api_url: str) -> Optional[AuthData]:
        row = self._conn.execute(
            "SELECT value FROM auth_data WHERE saleor_api_url = ?",
            (saleor_api_url,),
        ).fetchone()
        if not row:
            return None
        return AuthData(**json.loads(row[0]))

    def set(self, auth_data: AuthData) -> None:
        self._conn.execute(
            "INSERT OR REPLACE INTO auth_data (saleor_api_url, value) VALUES (?, ?)",
            (auth_data.saleor_api_url, auth_data.model_dump_json()),
        )
        self._conn.commit()

    def delete(self, saleor_api_url: str) -> None:
        self._conn.execute("DELETE FROM auth_data WHERE saleor_api_url = ?", (saleor_api_url,))
        self._conn.commit()

    def get_all(self) -> List[AuthData]:
        rows = self._conn.execute("SELECT value FROM auth_data").fetchall()
        return [AuthData(**json.loads(value)) for (value,) in rows]

    def close(self) -> None:
        self._conn.close()


def create_apl(config: APLConfig) -> BaseAPL:
    """Build the APL backend selected in configuration."""
    if config.backend == "sqlite":
        return SQLiteAPL(config.db_path)
    return InMemoryAPL()
