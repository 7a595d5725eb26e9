"""SQLite-backed single-table document store mirroring the DynamoDB layout."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.errors import ItemExistsError


class SQLiteStore:
    """JSON documents in a normalized table keyed by (pk, sk)."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False, timeout=10.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_records (
                    pk TEXT NOT NULL,
                    sk TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (pk, sk)
                )
                """
            )

    def put_item(self, item: Dict[str, Any], *, if_absent: bool = False) -> None:
        """Write an item, optionally refusing to replace an existing one."""
        pk = item.get("pk")
        sk = item.get("sk")
        if not pk or not sk:
            raise ValueError("Item must include 'pk' and 'sk' keys")

        data_json = json.dumps(item)
        with self._connect() as conn:
            if if_absent:
                try:
                    conn.execute(
                        "INSERT INTO kv_records (pk, sk, data) VALUES (?, ?, ?)",
                        (pk, sk, data_json),
                    )
                except sqlite3.IntegrityError as exc:
                    raise ItemExistsError(f"{pk}/{sk} already exists") from exc
                return
            conn.execute(
                """
                INSERT INTO kv_records (pk, sk, data)
                VALUES (?, ?, ?)
                ON CONFLICT(pk, sk) DO UPDATE SET data = excluded.data
                """,
                (pk, sk, data_json),
            )

    def get_item(
        self, *, partition_key: str, sort_key: str
    ) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM kv_records WHERE pk = ? AND sk = ?",
                (partition_key, sort_key),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["data"])

    def update_item(
        self, *, partition_key: str, sort_key: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Merge ``changes`` into an existing item and return the new document.

        Returns ``None`` when the item does not exist. The read and the write
        share one write-locked transaction.
        """
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT data FROM kv_records WHERE pk = ? AND sk = ?",
                (partition_key, sort_key),
            ).fetchone()
            if not row:
                return None
            item = json.loads(row["data"])
            item.update(changes)
            conn.execute(
                "UPDATE kv_records SET data = ? WHERE pk = ? AND sk = ?",
                (json.dumps(item), partition_key, sort_key),
            )
        return item

    def delete_item(self, *, partition_key: str, sort_key: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM kv_records WHERE pk = ? AND sk = ?",
                (partition_key, sort_key),
            )


__all__ = ["SQLiteStore"]
