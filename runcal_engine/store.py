"""Storage collaborators: a key/value settings map plus an append-only run log."""
from __future__ import annotations

import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

RECORD_FIELDS = (
    "date",
    "distance_km",
    "duration_min",
    "weight_kg",
    "calories_kcal",
    "memo",
    "recorded_at",
)


class CalorieStore(ABC):
    @abstractmethod
    def read_settings(self) -> Dict[str, Any]:
        """Raw stored settings map, key -> scalar."""

    @abstractmethod
    def write_setting(self, key: str, value: Any) -> None:
        """Insert or update one setting by key."""

    @abstractmethod
    def append_record(self, record: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def list_records(self) -> List[Dict[str, Any]]:
        """All records in insertion order."""


class MemoryStore(CalorieStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._settings: Dict[str, Any] = {}
        self._records: List[Dict[str, Any]] = []

    def read_settings(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._settings)

    def write_setting(self, key: str, value: Any) -> None:
        with self._lock:
            self._settings[key] = value

    def append_record(self, record: Dict[str, Any]) -> None:
        row = {f: record.get(f) for f in RECORD_FIELDS}
        with self._lock:
            self._records.append(row)

    def list_records(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(r) for r in self._records]


CREATE_SETTINGS = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT
)
"""

CREATE_RECORDS = """
CREATE TABLE IF NOT EXISTS records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TEXT,
    distance_km REAL,
    duration_min REAL,
    weight_kg REAL,
    calories_kcal REAL,
    memo TEXT,
    recorded_at TEXT
)
"""

UPSERT_SETTING = """
INSERT INTO settings (key, value) VALUES (?, ?)
ON CONFLICT(key) DO UPDATE SET value = excluded.value
"""

INSERT_RECORD = """
INSERT INTO records (date, distance_km, duration_min, weight_kg, calories_kcal, memo, recorded_at)
VALUES (?, ?, ?, ?, ?, ?, ?)
"""

SELECT_RECORDS = """
SELECT date, distance_km, duration_min, weight_kg, calories_kcal, memo, recorded_at
FROM records
ORDER BY id
"""


def _to_text(value: Any) -> Optional[str]:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return None if value is None else str(value)


def _from_text(value: Optional[str]) -> Any:
    # stored dates are ISO strings; anything else is handed back untouched
    if not value:
        return value
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return value


class SqliteStore(CalorieStore):
    def __init__(self, path: str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._conn() as conn:
            conn.execute(CREATE_SETTINGS)
            conn.execute(CREATE_RECORDS)

    @contextmanager
    def _conn(self):
        conn = sqlite3.connect(self.path)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def read_settings(self) -> Dict[str, Any]:
        with self._conn() as conn:
            rows = conn.execute("SELECT key, value FROM settings").fetchall()
        return {key: json.loads(value) for key, value in rows if key}

    def write_setting(self, key: str, value: Any) -> None:
        with self._conn() as conn:
            conn.execute(UPSERT_SETTING, (key, json.dumps(value)))

    def append_record(self, record: Dict[str, Any]) -> None:
        with self._conn() as conn:
            conn.execute(
                INSERT_RECORD,
                (
                    _to_text(record.get("date")),
                    record.get("distance_km"),
                    record.get("duration_min"),
                    record.get("weight_kg"),
                    record.get("calories_kcal"),
                    record.get("memo") or "",
                    _to_text(record.get("recorded_at")),
                ),
            )

    def list_records(self) -> List[Dict[str, Any]]:
        with self._conn() as conn:
            rows = conn.execute(SELECT_RECORDS).fetchall()
        out = []
        for row in rows:
            rec = dict(zip(RECORD_FIELDS, row))
            rec["date"] = _from_text(rec["date"])
            rec["recorded_at"] = _from_text(rec["recorded_at"])
            out.append(rec)
        return out


def open_store(path: Optional[str]) -> CalorieStore:
    if not path or path == ":memory:":
        logger.info("Using in-memory store")
        return MemoryStore()
    logger.info("Using SQLite store at %s", path)
    return SqliteStore(path)
