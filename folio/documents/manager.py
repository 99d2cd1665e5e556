"""
Folio Document Manager — rename flow with an explicit dialog state.

The rename flow is a two-state machine:

    RenameIdle ──begin_rename(doc)──▶ RenameEditing(doc)
        ▲                                   │
        └──── handle_rename() success ──────┤
        └──── cancel_rename() ──────────────┘

A failed rename stays in RenameEditing so the caller can retry. Because the
selected document lives inside the Editing state, "dialog open with no
document" cannot be represented.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from folio.documents.models import Document
from folio.documents.store import DocumentStore
from folio.engine.errors import DocumentNotFoundError, FolioError
from folio.engine.logging import log, log_document_operation
from folio.engine.notifications import LoggingNotifier, Notifier

logger = logging.getLogger("folio.documents.manager")

RENAME_FALLBACK_MESSAGE = "Failed to rename document"


@dataclass(frozen=True)
class RenameIdle:
    pass


@dataclass(frozen=True)
class RenameEditing:
    document: Document


RenameState = Union[RenameIdle, RenameEditing]


class DocumentManager:
    """
    Single-document metadata mutation with confirmation state.

    One instance per dialog owner; the state is not shared between instances.
    """

    def __init__(self, store: DocumentStore, notifier: Optional[Notifier] = None):
        self._store = store
        self._notifier = notifier or LoggingNotifier()
        self._state: RenameState = RenameIdle()

    # -------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------

    @property
    def state(self) -> RenameState:
        return self._state

    @property
    def rename_dialog_open(self) -> bool:
        return isinstance(self._state, RenameEditing)

    @property
    def selected_document(self) -> Optional[Document]:
        if isinstance(self._state, RenameEditing):
            return self._state.document
        return None

    def begin_rename(self, document: Document) -> None:
        """Open the rename dialog for ``document`` (replaces any current selection)."""
        self._state = RenameEditing(document)

    def cancel_rename(self) -> None:
        self._state = RenameIdle()

    # -------------------------------------------------------------------
    # Rename
    # -------------------------------------------------------------------

    async def handle_rename(self, new_name: str) -> None:
        """
        Rename the selected document to ``new_name`` (stored untrimmed).

        Silent no-op when nothing is selected or the trimmed name is empty.
        On success the dialog closes and the selection clears, unless another
        document was selected meanwhile; on failure the state is left untouched and a failure notification carries the error
        message.
        """
        state = self._state
        if not isinstance(state, RenameEditing) or not new_name.strip():
            return

        document = state.document
        try:
            result = await self._store.update(document.id, name=new_name)
            updated = result.unwrap()
            if updated is None:
                raise DocumentNotFoundError(
                    f"Document {document.id} no longer exists",
                    operation="rename",
                    object_ref=f"documents.{document.id}",
                    document_id=document.id,
                )
        except FolioError as e:
            logger.error(f"Error renaming document {document.id}: {e}")
            log(log_document_operation("rename", document.id, False, error=str(e)))
            self._notifier.failure("Rename Failed", e.message or RENAME_FALLBACK_MESSAGE)
            return

        log(log_document_operation(
            "rename", document.id, True, fields_changed=["name", "updated_at"],
        ))
        self._notifier.success("Document Renamed", "Document has been renamed successfully")
        # A selection made while the update was in flight stays open
        if self._state is state:
            self._state = RenameIdle()
