"""
Folio Document Store — Backing store contract.

Every primitive is a coroutine returning a StoreResult: either ``data`` or an
``error``, never both. Implementations catch their own driver exceptions and
hand them back as BackingStoreError values, so nothing crosses this boundary
unchecked.

The shipped implementation is folio.db.document_store.SqlDocumentStore.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Generic, List, Optional, TypeVar

from folio.documents.models import (
    Document,
    DocumentChanges,
    FolderSummary,
    NewDocument,
    RecycledDocument,
)
from folio.engine.errors import FolioError

T = TypeVar("T")

# Fields a caller may change through DocumentStore.update()
MUTABLE_FIELDS = frozenset(DocumentChanges.model_fields)


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Discriminated data-or-error result of a store primitive."""
    data: Optional[T] = None
    error: Optional[FolioError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return data, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.data  # type: ignore[return-value]

    @classmethod
    def success(cls, data: Any = None) -> "StoreResult[Any]":
        return cls(data=data)

    @classmethod
    def failed(cls, error: FolioError) -> "StoreResult[Any]":
        return cls(error=error)


class DocumentStore(ABC):
    """Filtered-query document store."""

    @abstractmethod
    async def insert(self, document: NewDocument) -> StoreResult[Document]:
        """Write a new document; the store assigns id and timestamps."""

    @abstractmethod
    async def get(self, document_id: str) -> StoreResult[Optional[Document]]:
        """Fetch one document by id, data is None when it does not exist."""

    @abstractmethod
    async def update(self, document_id: str, **changes: Any) -> StoreResult[Optional[Document]]:
        """
        Apply ``changes`` (validated as DocumentChanges) to the document with
        this id and refresh ``updated_at``. Data is the updated document, or
        None when no document matched. Invalid changes fail with
        FolioValidationError before anything is written.
        """

    @abstractmethod
    async def delete_by_folder(
        self, folder_name: str, folder_id: Optional[str] = None
    ) -> StoreResult[int]:
        """
        Delete every member of a folder in one atomic statement. Data is the
        number of rows removed (0 is not an error).
        """

    @abstractmethod
    async def search_by_name(self, term: str) -> StoreResult[List[Document]]:
        """Case-insensitive literal substring match on name, newest update first."""

    @abstractmethod
    async def list_documents(
        self,
        folder_name: Optional[str] = None,
        folder_id: Optional[str] = None,
        include_hidden: bool = True,
    ) -> StoreResult[List[Document]]:
        """
        List documents newest update first. With a folder reference, only its
        members; without, every document.
        """

    @abstractmethod
    async def count_in_folder(
        self, folder_name: str, folder_id: Optional[str] = None
    ) -> StoreResult[int]:
        """Number of documents in a folder."""

    @abstractmethod
    async def folder_summaries(self) -> StoreResult[List[FolderSummary]]:
        """Distinct non-null folder names with member counts, ordered by name."""

    # -------------------------------------------------------------------
    # Recycle bin
    # -------------------------------------------------------------------

    @abstractmethod
    async def move_to_recycle_bin(
        self, document_id: str, deleted_by: str, retention: timedelta
    ) -> StoreResult[Optional[RecycledDocument]]:
        """
        Move one document into the recycle bin in a single transaction. It
        expires ``retention`` after deletion. Data is None when no document
        matched.
        """

    @abstractmethod
    async def list_recycle_bin(self) -> StoreResult[List[RecycledDocument]]:
        """Every recycle bin entry, most recently deleted first."""

    @abstractmethod
    async def restore_from_recycle_bin(self, recycled_id: str) -> StoreResult[Optional[Document]]:
        """
        Put an entry back into documents under its original id and remove it
        from the bin. Data is None when no entry matched.
        """

    @abstractmethod
    async def purge_from_recycle_bin(self, recycled_id: str) -> StoreResult[int]:
        """Permanently delete one entry. Data is the number of rows removed."""

    @abstractmethod
    async def purge_expired(self, now: Optional[datetime] = None) -> StoreResult[int]:
        """Permanently delete every entry whose ``permanent_delete_at`` has passed."""
