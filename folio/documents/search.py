"""Folio Document Search — case-insensitive name lookup, most recent first."""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from folio.documents.models import Document
from folio.documents.store import DocumentStore
from folio.engine.logging import log, log_document_operation
from folio.engine.notifications import LoggingNotifier, Notifier

logger = logging.getLogger("folio.documents.search")


class DocumentSearch:
    """
    Substring search over document names.

    Matches are case-insensitive and literal (``%`` and ``_`` are not
    wildcards). An empty term matches every document. Results are ordered by
    ``updated_at`` descending; there is no pagination or relevance ranking.
    """

    def __init__(self, store: DocumentStore, notifier: Optional[Notifier] = None):
        self._store = store
        self._notifier = notifier or LoggingNotifier()

    async def search_documents(self, search_term: str) -> List[Document]:
        """
        Return documents whose name contains ``search_term``.

        A store failure is logged and notified, and an empty list is returned.
        """
        start = time.monotonic()
        result = await self._store.search_by_name(search_term)
        if not result.ok:
            logger.error(f"Error searching documents: {result.error}")
            log(log_document_operation("search", None, False, error=str(result.error)))
            self._notifier.failure("Search Failed", "Failed to search documents")
            return []

        documents = result.data or []
        log(log_document_operation(
            "search", None, True, duration_ms=(time.monotonic() - start) * 1000,
        ))
        return documents
