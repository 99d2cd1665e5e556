"""
Folio Document & Folder Models — Pydantic definitions.

Document: File metadata plus organizational attributes (folder, importance,
visibility). Rows live in the ``documents`` table (folio.db.models.DocumentRow).

FolderSummary: A folder is not stored. It is the set of documents sharing a
``folder`` value, summarised by a grouping query.

DocumentChanges: The fields an update may set, checked before any write.

RecycledDocument: A deleted document held in the recycle bin until it is
restored or its retention period runs out.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from folio.db.base import as_utc

logger = logging.getLogger("folio.documents.models")


# ---------------------------------------------------------------------------
# Document record
# ---------------------------------------------------------------------------

class Document(BaseModel):
    """
    Document metadata. The physical file sits at ``file_path`` in the file
    store and is never touched by this layer.

    Folder membership is carried by two references that are treated as
    equally authoritative: the ``folder`` name label and the ``folder_id``
    identifier. A document with neither is a root document.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(description="Opaque unique identifier")
    name: str = Field(max_length=255, description="Display name")
    file_path: str = Field(max_length=1024, description="Backing file store location")
    file_size: Optional[int] = Field(default=None, ge=0, description="Size in bytes")
    mime_type: Optional[str] = Field(default=None, max_length=100)
    folder: Optional[str] = Field(default=None, max_length=255, description="Folder name label")
    folder_id: Optional[str] = Field(default=None, description="Folder identifier")
    uploaded_by: str = Field(description="Uploading user id")
    created_at: datetime
    updated_at: datetime
    is_important: bool = False
    is_hidden: bool = False

    @field_validator("created_at", "updated_at")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_root(self) -> bool:
        return self.folder is None and self.folder_id is None

    def in_folder(self, folder_name: Optional[str], folder_id: Optional[str] = None) -> bool:
        """True when either folder reference matches."""
        if folder_name is not None and self.folder == folder_name:
            return True
        return folder_id is not None and self.folder_id == folder_id


# ---------------------------------------------------------------------------
# New document payload
# ---------------------------------------------------------------------------

class NewDocument(BaseModel):
    """Fields supplied when a document record is first written."""

    name: str = Field(min_length=1, max_length=255)
    file_path: str = Field(min_length=1, max_length=1024)
    uploaded_by: str = Field(min_length=1)
    file_size: Optional[int] = Field(default=None, ge=0)
    mime_type: Optional[str] = Field(default=None, max_length=100)
    folder: Optional[str] = Field(default=None, max_length=255)
    folder_id: Optional[str] = None
    is_important: bool = False
    is_hidden: bool = False

    @field_validator("name", "file_path", "uploaded_by")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


# ---------------------------------------------------------------------------
# Derived folder view
# ---------------------------------------------------------------------------

class FolderSummary(BaseModel):
    """One row of the folder grouping view."""

    model_config = ConfigDict(frozen=True)

    name: str
    document_count: int = Field(ge=1)
    last_updated: datetime

    @field_validator("last_updated")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


# ---------------------------------------------------------------------------
# Update payload
# ---------------------------------------------------------------------------

class DocumentChanges(BaseModel):
    """
    Fields a caller may change on an existing document. Unknown fields are
    rejected, and so is an explicit None for a non-nullable one.
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    folder: Optional[str] = Field(default=None, max_length=255)
    folder_id: Optional[str] = None
    is_important: Optional[bool] = None
    is_hidden: Optional[bool] = None

    @field_validator("name", "is_important", "is_hidden")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


# ---------------------------------------------------------------------------
# Recycle bin entry
# ---------------------------------------------------------------------------

class RecycledDocument(BaseModel):
    """A deleted document held for restore until ``permanent_delete_at``."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    original_document_id: str
    name: str
    file_path: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    folder: Optional[str] = None
    folder_id: Optional[str] = None
    uploaded_by: str
    is_important: bool = False
    is_hidden: bool = False
    original_created_at: datetime
    original_updated_at: datetime
    deleted_by: str
    deleted_at: datetime
    permanent_delete_at: datetime

    @field_validator("original_created_at", "original_updated_at", "deleted_at", "permanent_delete_at")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    def days_until_permanent_delete(self, now: Optional[datetime] = None) -> int:
        """Whole days left, rounded up, never negative."""
        remaining = self.permanent_delete_at - (as_utc(now) or datetime.now(timezone.utc))
        return max(0, math.ceil(remaining.total_seconds() / 86400))
