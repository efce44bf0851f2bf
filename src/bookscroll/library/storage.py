"""SQLite persistence for chunk payloads, covers, images and the shelf list."""

from __future__ import annotations

import json
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Optional

from bookscroll.errors import PersistenceError

_SCHEMA = """
CREATE TABLE IF NOT EXISTS chunks (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS covers (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS images (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL
);

CREATE TABLE IF NOT EXISTS shelf (
    id INTEGER PRIMARY KEY CHECK (id = 0),
    payload TEXT NOT NULL,
    updated_at REAL NOT NULL
);
"""


class KeyValueStore:
    """One namespace of the payload store: put / get / delete by key."""

    def __init__(self, storage: Storage, table: str) -> None:
        self._storage = storage
        self._table = table

    def put(self, key: str, value: Any) -> None:
        self._storage._write(
            f"INSERT OR REPLACE INTO {self._table} (key, value) VALUES (?, ?)",
            (key, value),
        )

    def get(self, key: str) -> Optional[Any]:
        rows = self._storage._query(
            f"SELECT value FROM {self._table} WHERE key = ?", (key,)
        )
        return rows[0]["value"] if rows else None

    def delete(self, key: str) -> None:
        self._storage._write(f"DELETE FROM {self._table} WHERE key = ?", (key,))

    def delete_prefix(self, prefix: str) -> None:
        self._storage._write(
            f"DELETE FROM {self._table} WHERE substr(key, 1, ?) = ?",
            (len(prefix), prefix),
        )

    def keys(self) -> list[str]:
        rows = self._storage._query(f"SELECT key FROM {self._table} ORDER BY key")
        return [r["key"] for r in rows]


class Storage:
    """Persistence context. Open it once, pass it around, close it at exit."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open database {db_path}: {e}") from e
        try:
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._init_schema()
        except sqlite3.Error as e:
            self._conn.close()
            raise PersistenceError(f"Cannot open database {db_path}: {e}") from e

        self.chunks = KeyValueStore(self, "chunks")
        self.covers = KeyValueStore(self, "covers")
        self.images = KeyValueStore(self, "images")

    def _init_schema(self) -> None:
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> Storage:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise PersistenceError(str(e)) from e

    def _write(self, sql: str, params: tuple = ()) -> None:
        with self._lock:
            try:
                self._conn.execute(sql, params)
                self._conn.commit()
            except sqlite3.Error as e:
                raise PersistenceError(str(e)) from e

    # ── Shelf list ─────────────────────────────────────────

    def get_shelf(self) -> list[dict[str, Any]]:
        rows = self._query("SELECT payload FROM shelf WHERE id = 0")
        if not rows:
            return []
        try:
            return json.loads(rows[0]["payload"])
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt shelf data: {e}") from e

    def save_shelf(self, shelf: list[dict[str, Any]]) -> None:
        self._write(
            "INSERT OR REPLACE INTO shelf (id, payload, updated_at) VALUES (0, ?, ?)",
            (json.dumps(shelf, ensure_ascii=False), time.time()),
        )
