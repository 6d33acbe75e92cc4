from __future__ import annotations

# produce_api/db.py
import logging
import os
import sqlite3
import threading
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from .config import MEMORY, default_db_path
from .errors import ConfigError, StorageError, StorageUnavailable, StorageWriteError

logger = logging.getLogger(__name__)

DDL = """
CREATE TABLE IF NOT EXISTS produce (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  type TEXT NOT NULL,
  price_per_kg REAL NOT NULL
)
"""

Params = Mapping[str, Any]


@dataclass
class ExecResult:
    rowcount: int
    lastrowid: int | None


class StorageHandle:
    """
    Open session to the SQLite store.

    Every driver adapter implements the same three calls and hands rows back
    as plain dicts keyed by column name, so nothing above this module sees a
    driver-specific row type. SQL uses named parameters (``:name``), which
    both drivers accept.
    """

    driver = ""

    def __init__(self, location: str):
        self.location = location
        self._lock = threading.Lock()

    @property
    def in_memory(self) -> bool:
        return self.location == MEMORY

    def execute(self, sql: str, params: Params | None = None) -> ExecResult:
        raise NotImplementedError

    def fetch_one(self, sql: str, params: Params | None = None) -> dict[str, Any] | None:
        raise NotImplementedError

    def fetch_all(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def ensure_schema(self) -> None:
        self.execute(DDL)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.location!r}>"


class SqliteHandle(StorageHandle):
    """stdlib sqlite3: one autocommit connection, keyed rows via sqlite3.Row."""

    driver = "sqlite3"

    def __init__(self, location: str):
        super().__init__(location)
        try:
            self._conn = sqlite3.connect(
                location,
                check_same_thread=False,
                isolation_level=None,
            )
        except sqlite3.Error as e:
            raise StorageUnavailable(f"cannot open {location}: {e}") from e
        self._conn.row_factory = sqlite3.Row

    def execute(self, sql: str, params: Params | None = None) -> ExecResult:
        try:
            with self._lock:
                cur = self._conn.execute(sql, params or {})
                return ExecResult(cur.rowcount, cur.lastrowid)
        except sqlite3.Error as e:
            raise StorageWriteError(str(e)) from e

    def fetch_one(self, sql: str, params: Params | None = None) -> dict[str, Any] | None:
        try:
            with self._lock:
                row = self._conn.execute(sql, params or {}).fetchone()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        return dict(row) if row is not None else None

    def fetch_all(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        try:
            with self._lock:
                rows = self._conn.execute(sql, params or {}).fetchall()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        return [dict(r) for r in rows]

    def close(self) -> None:
        self._conn.close()


def _keyed(keys: Sequence[str], row: Sequence[Any]) -> dict[str, Any]:
    return dict(zip(keys, row))


class SqlAlchemyHandle(StorageHandle):
    """SQLAlchemy Core engine. Result rows are positional and get zipped with the result keys."""

    driver = "sqlalchemy"

    def __init__(self, location: str):
        super().__init__(location)
        if location == MEMORY:
            # StaticPool hands out the same connection, so the in-memory database survives checkouts
            self._engine = sa.create_engine(
                "sqlite://",
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            self._engine = sa.create_engine(
                f"sqlite:///{location}",
                connect_args={"check_same_thread": False},
            )

    def execute(self, sql: str, params: Params | None = None) -> ExecResult:
        try:
            with self._lock, self._engine.begin() as conn:
                res = conn.execute(sa.text(sql), dict(params or {}))
                return ExecResult(res.rowcount, res.lastrowid)
        except SQLAlchemyError as e:
            raise StorageWriteError(str(e)) from e

    def fetch_one(self, sql: str, params: Params | None = None) -> dict[str, Any] | None:
        try:
            with self._lock, self._engine.connect() as conn:
                res = conn.execute(sa.text(sql), dict(params or {}))
                keys = list(res.keys())
                row = res.fetchone()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        return _keyed(keys, row) if row is not None else None

    def fetch_all(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        try:
            with self._lock, self._engine.connect() as conn:
                res = conn.execute(sa.text(sql), dict(params or {}))
                keys = list(res.keys())
                rows = res.fetchall()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        return [_keyed(keys, r) for r in rows]

    def close(self) -> None:
        self._engine.dispose()


_HANDLES: dict[str, type[StorageHandle]] = {
    SqliteHandle.driver: SqliteHandle,
    SqlAlchemyHandle.driver: SqlAlchemyHandle,
}


def resolve_location(location: str | None = None) -> str:
    """
    None -> default file under ./data; ":memory:" passes through untouched.
    The parent directory of a file location is created if missing.
    """
    if location == MEMORY:
        return MEMORY
    path = location or default_db_path()
    dirn = os.path.dirname(os.path.abspath(path))
    try:
        os.makedirs(dirn, exist_ok=True)
    except OSError as e:
        raise StorageUnavailable(f"cannot create directory {dirn}: {e}") from e
    return path


def open_storage(location: str | None = None, driver: str = "sqlite3") -> StorageHandle:
    """
    Open (or create) the store and make sure the produce table exists.
    Safe to call on every start: schema creation never truncates.
    """
    handle_cls = _HANDLES.get(driver)
    if handle_cls is None:
        raise ConfigError(f"unknown db driver: {driver}")

    path = resolve_location(location)
    handle = handle_cls(path)
    try:
        handle.ensure_schema()
    except StorageError as e:
        handle.close()
        raise StorageUnavailable(f"cannot initialize {path}: {e}") from e

    logger.info("storage opened: driver=%s location=%s", driver, path)
    return handle
