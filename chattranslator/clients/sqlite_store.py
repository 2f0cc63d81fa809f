"""SQLite-backed substitute for the Firestore credential store."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional

from chattranslator.core.errors import StorageError, WriteConflictError
from chattranslator.models.token import StoredRecord


class SQLiteStore:
    """Document store keyed by (collection, document_id) with integer versions."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    document_id TEXT NOT NULL,
                    data TEXT NOT NULL,
                    version INTEGER NOT NULL,
                    PRIMARY KEY (collection, document_id)
                )
                """
            )

    def get(self, collection: str, document_id: str) -> Optional[StoredRecord]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT data, version FROM documents"
                    " WHERE collection = ? AND document_id = ?",
                    (collection, document_id),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {collection}/{document_id}") from exc
        if not row:
            return None
        return StoredRecord(data=json.loads(row["data"]), version=row["version"])

    def set(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        data_json = json.dumps(data)
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO documents (collection, document_id, data, version)
                    VALUES (?, ?, ?, 1)
                    ON CONFLICT(collection, document_id) DO UPDATE SET
                        data = excluded.data,
                        version = documents.version + 1
                    """,
                    (collection, document_id, data_json),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {collection}/{document_id}") from exc

    def compare_and_set(
        self,
        collection: str,
        document_id: str,
        data: Dict[str, Any],
        *,
        expected_version: Any,
    ) -> None:
        """Write only if the stored version still equals ``expected_version``."""
        data_json = json.dumps(data)
        try:
            with self._connect() as conn:
                if expected_version is None:
                    try:
                        conn.execute(
                            "INSERT INTO documents (collection, document_id, data, version)"
                            " VALUES (?, ?, ?, 1)",
                            (collection, document_id, data_json),
                        )
                    except sqlite3.IntegrityError as exc:
                        raise WriteConflictError(
                            f"{collection}/{document_id} was created concurrently"
                        ) from exc
                    return
                cursor = conn.execute(
                    """
                    UPDATE documents SET data = ?, version = version + 1
                    WHERE collection = ? AND document_id = ? AND version = ?
                    """,
                    (data_json, collection, document_id, expected_version),
                )
                if cursor.rowcount == 0:
                    raise WriteConflictError(
                        f"{collection}/{document_id} changed since version {expected_version}"
                    )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {collection}/{document_id}") from exc


__all__ = ["SQLiteStore"]
