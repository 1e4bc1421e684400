"""JSON-file table persistence.

Each table is a JSON list of row dicts stored in DATA_DIR/<table>.json.
Rows carry an ``id`` and, for user-owned tables, a ``user_id``; every read
and write can be scoped to a user so one account never sees another's rows.
Writes go through a temp file that replaces the table atomically.
"""
import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from household.infra import paths

logger = logging.getLogger(__name__)

_lock = RLock()

Row = Dict[str, Any]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid4().hex


class TableRepository:
    table: str = ""

    def __init__(self, table: Optional[str] = None):
        if table:
            self.table = table
        if not self.table:
            raise ValueError("TableRepository needs a table name")

    # --- file access ---
    def _file(self):
        return paths.table_file(self.table)

    def _load(self) -> List[Row]:
        path = self._file()
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except json.JSONDecodeError:
            logger.error("Table %s is not valid JSON; treating as empty", self.table)
            return []
        return rows if isinstance(rows, list) else []

    def _save(self, rows: List[Row]) -> None:
        path = self._file()
        os.makedirs(path.parent, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{self.table}_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(rows, tmp, indent=2, ensure_ascii=False, default=str)
            shutil.move(tmp_path, str(path))
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    @staticmethod
    def _matches(row: Row, user_id: Optional[str], filters: Dict[str, Any]) -> bool:
        if user_id is not None and row.get("user_id") != user_id:
            return False
        return all(row.get(k) == v for k, v in filters.items())

    # --- queries ---
    def list(self, user_id: Optional[str] = None, **filters) -> List[Row]:
        with _lock:
            return [r for r in self._load() if self._matches(r, user_id, filters)]

    def get(self, row_id: str, user_id: Optional[str] = None) -> Optional[Row]:
        return self.find_one(user_id, id=row_id)

    def find_one(self, user_id: Optional[str] = None, **filters) -> Optional[Row]:
        rows = self.list(user_id, **filters)
        return rows[0] if rows else None

    # --- mutations ---
    def insert(self, row: Row, user_id: Optional[str] = None) -> Row:
        new_row = dict(row)
        new_row["id"] = new_row.get("id") or new_id()
        if user_id is not None:
            new_row["user_id"] = user_id
        new_row.setdefault("created_at", now_iso())
        with _lock:
            rows = self._load()
            rows.append(new_row)
            self._save(rows)
        return new_row

    def update(self, row_id: str, changes: Row, user_id: Optional[str] = None) -> Optional[Row]:
        """Merge changes into a row; returns the updated row or None when not found."""
        with _lock:
            rows = self._load()
            for r in rows:
                if r.get("id") == row_id and self._matches(r, user_id, {}):
                    r.update({k: v for k, v in changes.items() if k not in ("id", "user_id")})
                    self._save(rows)
                    return dict(r)
        return None

    def delete(self, row_id: str, user_id: Optional[str] = None) -> bool:
        with _lock:
            rows = self._load()
            kept = [r for r in rows if not (r.get("id") == row_id and self._matches(r, user_id, {}))]
            if len(kept) == len(rows):
                return False
            self._save(kept)
            return True

    def upsert(self, row: Row, keys: Iterable[str], user_id: Optional[str] = None) -> Row:
        """Insert, or merge into the row whose natural key columns match.

        With a user_id only that user's rows can match, and an existing row keeps its owner.
        """
        keys = tuple(keys)
        with _lock:
            rows = self._load()
            for r in rows:
                if self._matches(r, user_id, {}) and all(r.get(k) == row.get(k) for k in keys):
                    r.update({k: v for k, v in row.items() if k not in ("id", "user_id")})
                    self._save(rows)
                    return dict(r)
            new_row = dict(row)
            new_row["id"] = new_row.get("id") or new_id()
            if user_id is not None:
                new_row["user_id"] = user_id
            new_row.setdefault("created_at", now_iso())
            rows.append(new_row)
            self._save(rows)
            return new_row


__all__ = ['TableRepository', 'now_iso', 'new_id']
