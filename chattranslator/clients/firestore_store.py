"""
Utility wrapper for storing credential and user records in Firestore.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from google.api_core.exceptions import (
    AlreadyExists,
    FailedPrecondition,
    GoogleAPICallError,
    NotFound,
)
from google.cloud import firestore

from chattranslator.core.errors import StorageError, WriteConflictError
from chattranslator.models.token import StoredRecord


class FirestoreStore:
    """Document CRUD with version-checked writes keyed on ``update_time``."""

    def __init__(self, client: firestore.Client) -> None:
        self._client = client

    def _document(self, collection: str, document_id: str) -> firestore.DocumentReference:
        return self._client.collection(collection).document(document_id)

    def get(self, collection: str, document_id: str) -> Optional[StoredRecord]:
        """Return the document, or ``None`` when it does not exist."""
        try:
            snapshot = self._document(collection, document_id).get()
        except GoogleAPICallError as exc:
            raise StorageError(f"Failed to read {collection}/{document_id}") from exc
        if not snapshot.exists:
            return None
        return StoredRecord(data=snapshot.to_dict() or {}, version=snapshot.update_time)

    def set(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        """Overwrite the document unconditionally."""
        try:
            self._document(collection, document_id).set(data)
        except GoogleAPICallError as exc:
            raise StorageError(f"Failed to write {collection}/{document_id}") from exc

    def compare_and_set(
        self,
        collection: str,
        document_id: str,
        data: Dict[str, Any],
        *,
        expected_version: Any,
    ) -> None:
        """
        Write the document only if nobody else wrote it since it was read.

        ``expected_version=None`` means the document must not exist yet.
        """
        document = self._document(collection, document_id)
        try:
            if expected_version is None:
                document.create(data)
            else:
                option = self._client.write_option(last_update_time=expected_version)
                document.update(data, option=option)
        except (AlreadyExists, FailedPrecondition, NotFound) as exc:
            raise WriteConflictError(
                f"{collection}/{document_id} changed since it was read"
            ) from exc
        except GoogleAPICallError as exc:
            raise StorageError(f"Failed to write {collection}/{document_id}") from exc


__all__ = ["FirestoreStore"]
