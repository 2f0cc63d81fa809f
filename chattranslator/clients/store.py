"""Interface shared by the Firestore and SQLite document stores."""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from chattranslator.models.token import StoredRecord


class CredentialStore(Protocol):
    """
    Keyed document access.

    ``get`` returns ``None`` for a missing document and raises
    ``StorageError`` only when the backend itself fails. ``get`` followed by
    ``set`` is not atomic; callers that need read-modify-write safety use
    ``compare_and_set`` with the version returned by ``get``.
    """

    def get(self, collection: str, document_id: str) -> Optional[StoredRecord]: ...

    def set(self, collection: str, document_id: str, data: Dict[str, Any]) -> None: ...

    def compare_and_set(
        self,
        collection: str,
        document_id: str,
        data: Dict[str, Any],
        *,
        expected_version: Any,
    ) -> None: ...


__all__ = ["CredentialStore"]
