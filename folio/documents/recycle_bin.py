"""
Folio Recycle Bin — restore or permanently remove deleted documents.

DocumentService.delete_document moves a document here. Each entry keeps the
full document record plus who deleted it and when it expires; expired
entries are removed by cleanup_expired.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from folio.documents.models import Document, RecycledDocument
from folio.documents.store import DocumentStore
from folio.engine.logging import log, log_document_operation
from folio.engine.notifications import LoggingNotifier, Notifier

logger = logging.getLogger("folio.documents.recycle_bin")


class RecycleBin:
    """Recycle bin actions over a DocumentStore. Failures notify and are swallowed."""

    def __init__(self, store: DocumentStore, notifier: Optional[Notifier] = None):
        self._store = store
        self._notifier = notifier or LoggingNotifier()

    async def list_items(self) -> List[RecycledDocument]:
        """Entries, most recently deleted first."""
        result = await self._store.list_recycle_bin()
        if not result.ok:
            logger.error(f"Error fetching recycle bin items: {result.error}")
            self._notifier.failure("Error", "Failed to load recycle bin items")
            return []
        return result.data or []

    async def restore_document(self, recycled_id: str) -> Optional[Document]:
        result = await self._store.restore_from_recycle_bin(recycled_id)
        if not result.ok:
            self._fail("restore", recycled_id, "Restore Failed",
                       result.error.message or "Failed to restore document")
            return None
        if result.data is None:
            self._fail("restore", recycled_id, "Restore Failed", _not_found(recycled_id))
            return None

        document = result.data
        log(log_document_operation("restore", document.id, True))
        self._notifier.success("Success", f'"{document.name}" has been restored')
        return document

    async def permanently_delete(self, recycled_id: str, document_name: Optional[str] = None) -> bool:
        result = await self._store.purge_from_recycle_bin(recycled_id)
        if not result.ok:
            self._fail("purge", recycled_id, "Delete Failed",
                       result.error.message or "Failed to permanently delete document")
            return False
        if not result.data:
            self._fail("purge", recycled_id, "Delete Failed", _not_found(recycled_id))
            return False

        log(log_document_operation("purge", None, True))
        self._notifier.success("Success", f'"{document_name or recycled_id}" has been permanently deleted')
        return True

    async def cleanup_expired(self, now: Optional[datetime] = None) -> Optional[int]:
        """Remove every expired entry. Returns how many were removed."""
        result = await self._store.purge_expired(now)
        if not result.ok:
            logger.error(f"Error cleaning up expired recycle bin items: {result.error}")
            self._notifier.failure("Cleanup Failed", result.error.message or "Failed to cleanup expired items")
            return None

        logger.info(f"Removed {result.data} expired recycle bin items")
        self._notifier.success("Success", "Expired items have been cleaned up")
        return result.data

    def _fail(self, operation: str, recycled_id: str, title: str, message: str) -> None:
        logger.error(f"Recycle bin {operation} of {recycled_id} failed: {message}")
        log(log_document_operation(operation, None, False, error=message))
        self._notifier.failure(title, message)


def _not_found(recycled_id: str) -> str:
    return f"Recycle bin item {recycled_id} not found"
