"""
Folio Document Service — single-document actions.

Handles:
- Registering an uploaded file as a document record (MIME detection, path)
- Moving a document between folders
- Deleting a document (moves it to the recycle bin)
- Toggling the important / hidden flags
- Copying a document record

Every action reports through the notifier and returns None on failure;
store errors are logged and never raised to the caller.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from datetime import timedelta
from typing import Any, List, Optional

from pydantic import ValidationError

from folio.documents.models import Document, NewDocument, RecycledDocument
from folio.documents.store import DocumentStore
from folio.engine.errors import DocumentNotFoundError, FolioError, FolioValidationError
from folio.engine.logging import log, log_document_operation
from folio.engine.notifications import LoggingNotifier, Notifier

logger = logging.getLogger("folio.documents.service")

UPLOAD_ROOT = "uploads"
# Folder label given to documents added or moved without a folder reference
GENERAL_FOLDER = "general"
DEFAULT_RETENTION_DAYS = 15


class DocumentService:
    """Document-level actions over a DocumentStore."""

    def __init__(
        self,
        store: DocumentStore,
        notifier: Optional[Notifier] = None,
        default_folder: Optional[str] = GENERAL_FOLDER,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ):
        self._store = store
        self._notifier = notifier or LoggingNotifier()
        self._default_folder = default_folder
        self._retention = timedelta(days=retention_days)

    # -------------------------------------------------------------------
    # Add
    # -------------------------------------------------------------------

    async def add_document(
        self,
        name: str,
        uploaded_by: str,
        file_path: Optional[str] = None,
        folder: Optional[str] = None,
        folder_id: Optional[str] = None,
        file_size: Optional[int] = None,
        mime_type: Optional[str] = None,
    ) -> Optional[Document]:
        """
        Register an uploaded file.

        When no folder reference is given the service's default folder is
        used. ``file_path`` defaults to uploads/{folder}/{sanitized name} and
        ``mime_type`` is guessed from the name.
        """
        if folder is None and folder_id is None:
            folder = self._default_folder
        if file_path is None:
            segment = folder_id or folder or GENERAL_FOLDER
            file_path = f"{UPLOAD_ROOT}/{segment}/{self._safe_filename(name)}"
        if mime_type is None:
            mime_type = self.detect_mime_type(name)

        try:
            payload = NewDocument(
                name=name,
                file_path=file_path,
                uploaded_by=uploaded_by,
                file_size=file_size,
                mime_type=mime_type,
                folder=folder,
                folder_id=folder_id,
            )
        except ValidationError as e:
            err = FolioValidationError(
                "Invalid document", operation="add", validation_errors=e.errors(),
            )
            logger.error(f"Error uploading document '{name}': {e}")
            log(log_document_operation("add", None, False, user_id=uploaded_by, error=str(err)))
            self._notifier.failure("Upload Failed", "Failed to upload document")
            return None

        result = await self._store.insert(payload)
        if not result.ok:
            return self._report_failure("add", None, "Upload Failed", result.error,
                                        "Failed to upload document")

        document = result.data
        log(log_document_operation("add", document.id, True, user_id=uploaded_by))
        self._notifier.success("Success", f'Document "{name}" uploaded successfully')
        return document

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------

    async def move_document(
        self,
        document_id: str,
        folder: Optional[str] = None,
        folder_id: Optional[str] = None,
    ) -> Optional[Document]:
        """
        Reassign both folder references. With neither reference the document
        goes to the default folder (a root document when that is None).
        """
        if folder is None and folder_id is None:
            folder = self._default_folder
        document = await self._update(
            "move", document_id, "Move Failed", "Failed to move document",
            folder=folder, folder_id=folder_id,
        )
        if document is not None:
            self._notifier.success("Success", "Document moved successfully")
        return document

    async def toggle_important(self, document: Document) -> Optional[Document]:
        target = not document.is_important
        updated = await self._update(
            "toggle_important", document.id, "Update Failed", "Failed to update document",
            is_important=target,
        )
        if updated is not None:
            label = "marked as important" if target else "unmarked as important"
            self._notifier.success("Document Updated", f"Document {label}")
        return updated

    async def toggle_hidden(self, document: Document) -> Optional[Document]:
        target = not document.is_hidden
        updated = await self._update(
            "toggle_hidden", document.id, "Update Failed", "Failed to update document",
            is_hidden=target,
        )
        if updated is not None:
            label = "hidden" if target else "made visible"
            self._notifier.success("Document Updated", f"Document {label}")
        return updated

    async def delete_document(self, document_id: str, deleted_by: str) -> Optional[RecycledDocument]:
        """
        Move a document to the recycle bin. It stays restorable for the
        configured retention period (see folio.documents.recycle_bin).
        """
        result = await self._store.move_to_recycle_bin(document_id, deleted_by, self._retention)
        if not result.ok:
            return self._report_failure("delete", document_id, "Delete Failed", result.error,
                                        "Failed to delete document")
        if result.data is None:
            return self._report_failure("delete", document_id, "Delete Failed",
                                        self._not_found("delete", document_id),
                                        "Failed to delete document")

        recycled = result.data
        log(log_document_operation("delete", document_id, True, user_id=deleted_by))
        self._notifier.success("Success", f'"{recycled.name}" moved to the recycle bin')
        return recycled

    async def copy_document(
        self, document: Document, uploaded_by: Optional[str] = None
    ) -> Optional[Document]:
        """Insert a new record pointing at the same file, named "Copy of <name>"."""
        payload = NewDocument(
            name=f"Copy of {document.name}"[:255],
            file_path=document.file_path,
            uploaded_by=uploaded_by or document.uploaded_by,
            file_size=document.file_size,
            mime_type=document.mime_type,
            folder=document.folder,
            folder_id=document.folder_id,
        )
        result = await self._store.insert(payload)
        if not result.ok:
            return self._report_failure("copy", document.id, "Copy Failed", result.error,
                                        "Failed to copy document")

        log(log_document_operation("copy", result.data.id, True, user_id=payload.uploaded_by))
        self._notifier.success("Document Copied", "Document has been copied successfully")
        return result.data

    async def list_documents(self, include_hidden: bool = True) -> List[Document]:
        result = await self._store.list_documents(include_hidden=include_hidden)
        if not result.ok:
            logger.error(f"Error fetching documents: {result.error}")
            self._notifier.failure("Error", "Failed to load documents")
            return []
        return result.data or []

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------

    async def _update(
        self,
        operation: str,
        document_id: str,
        failure_title: str,
        fallback: str,
        **changes: Any,
    ) -> Optional[Document]:
        result = await self._store.update(document_id, **changes)
        if not result.ok:
            return self._report_failure(operation, document_id, failure_title, result.error, fallback)
        if result.data is None:
            return self._report_failure(operation, document_id, failure_title,
                                        self._not_found(operation, document_id), fallback)

        log(log_document_operation(
            operation, document_id, True, fields_changed=[*changes, "updated_at"],
        ))
        return result.data

    def _report_failure(
        self,
        operation: str,
        document_id: Optional[str],
        title: str,
        error: Optional[FolioError],
        fallback: str,
    ) -> None:
        logger.error(f"Error during document {operation} ({document_id}): {error}")
        log(log_document_operation(operation, document_id, False, error=str(error)))
        message = error.message if error is not None and error.message else fallback
        self._notifier.failure(title, message)
        return None

    @staticmethod
    def _not_found(operation: str, document_id: str) -> DocumentNotFoundError:
        return DocumentNotFoundError(
            f"Document {document_id} not found",
            operation=operation,
            object_ref=f"documents.{document_id}",
            document_id=document_id,
        )

    @staticmethod
    def _safe_filename(filename: str) -> str:
        """
        Sanitize a filename for use in a storage path.

        Removes path separators, control chars and leading dots.
        Preserves extension.
        """
        name = os.path.basename(filename)
        name = "".join(c for c in name if c.isprintable() and c not in '<>:"/\\|?*')
        name = name.lstrip(".")
        if not name:
            name = "unnamed_document"
        if len(name) > 200:
            base, ext = os.path.splitext(name)
            name = base[:200 - len(ext)] + ext
        return name

    @staticmethod
    def detect_mime_type(filename: str) -> str:
        """Detect MIME type from filename."""
        mime, _ = mimetypes.guess_type(filename)
        return mime or "application/octet-stream"
