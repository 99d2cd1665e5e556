"""
Folio Folder Operations — create, cascade-delete and list derived folders.

Folders are never stored: a folder exists while at least one document carries
its name (or id). Creating one is a name reservation that only emits a
notification; deleting one removes every member document in a single
statement.

Error discipline:
    create_folder   — notifies, then re-raises
    delete_folder   — notifies, swallows (returns None)
    list_*          — notifies, swallows (returns [])
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from folio.documents.models import Document, FolderSummary
from folio.documents.store import DocumentStore
from folio.engine.errors import FolioError, FolioValidationError
from folio.engine.logging import log, log_folder_operation
from folio.engine.notifications import LoggingNotifier, Notifier

logger = logging.getLogger("folio.documents.folders")


class FolderOperations:
    """Folder-level operations over a DocumentStore."""

    def __init__(self, store: DocumentStore, notifier: Optional[Notifier] = None):
        self._store = store
        self._notifier = notifier or LoggingNotifier()

    async def create_folder(self, folder_name: str) -> str:
        """
        Reserve a folder name. Nothing is persisted and no document moves;
        the folder becomes observable once a document is assigned to it.

        Returns the name as given.

        Raises:
            FolioValidationError: blank name.
            BackingStoreError: the member-count lookup failed.
        """
        start = time.monotonic()
        try:
            if not folder_name or not folder_name.strip():
                raise FolioValidationError(
                    "Folder name must not be empty",
                    operation="create_folder",
                    object_ref="folders",
                    validation_errors=[{"field": "folder_name", "error": "blank"}],
                )

            existing = (await self._store.count_in_folder(folder_name)).unwrap()
        except FolioError as e:
            logger.error(f"Error creating folder '{folder_name}': {e}")
            log(log_folder_operation("create", folder_name or "", False, error=str(e)))
            self._notifier.failure("Error", "Failed to create folder")
            raise

        if existing:
            logger.info(f"Folder '{folder_name}' already holds {existing} document(s)")
        log(log_folder_operation(
            "create", folder_name, True,
            documents_affected=0,
            duration_ms=(time.monotonic() - start) * 1000,
        ))
        self._notifier.success("Success", f'Folder "{folder_name}" created successfully')
        return folder_name

    async def delete_folder(self, folder_name: str, folder_id: Optional[str] = None) -> None:
        """
        Delete every document in the folder, all-or-nothing.

        A folder with no members deletes cleanly. Store failures are logged
        and reported through the notifier only; they are not raised.
        """
        start = time.monotonic()
        result = await self._store.delete_by_folder(folder_name, folder_id)
        if not result.ok:
            logger.error(f"Error deleting folder '{folder_name}': {result.error}")
            log(log_folder_operation(
                "delete", folder_name, False, folder_id=folder_id, error=str(result.error),
            ))
            self._notifier.failure("Error", "Failed to delete folder")
            return

        logger.info(f"Deleted folder '{folder_name}' ({result.data} document(s))")
        log(log_folder_operation(
            "delete", folder_name, True,
            folder_id=folder_id,
            documents_affected=result.data,
            duration_ms=(time.monotonic() - start) * 1000,
        ))
        self._notifier.success(
            "Success", f'Folder "{folder_name}" and all its contents deleted successfully'
        )

    async def list_folders(self) -> List[FolderSummary]:
        """Derived folder view, ordered by name."""
        result = await self._store.folder_summaries()
        if not result.ok:
            logger.error(f"Error fetching folders: {result.error}")
            self._notifier.failure("Error", "Failed to load folders")
            return []
        return result.data or []

    async def list_folder_documents(
        self,
        folder_name: str,
        folder_id: Optional[str] = None,
        include_hidden: bool = False,
    ) -> List[Document]:
        """Members of a folder, most recently updated first."""
        result = await self._store.list_documents(
            folder_name=folder_name,
            folder_id=folder_id,
            include_hidden=include_hidden,
        )
        if not result.ok:
            logger.error(f"Error fetching documents for folder '{folder_name}': {result.error}")
            self._notifier.failure("Error", "Failed to load documents")
            return []
        return result.data or []
