"""
Folio Document & Folder Management.

Documents are metadata records pointing at stored files. Folders are derived
from the documents' folder references and are never stored on their own.
"""

from folio.documents.folders import FolderOperations
from folio.documents.manager import DocumentManager, RenameEditing, RenameIdle
from folio.documents.models import (
    Document,
    DocumentChanges,
    FolderSummary,
    NewDocument,
    RecycledDocument,
)
from folio.documents.recycle_bin import RecycleBin
from folio.documents.search import DocumentSearch
from folio.documents.service import DocumentService
from folio.documents.store import DocumentStore, StoreResult

__all__ = [
    "Document",
    "NewDocument",
    "DocumentChanges",
    "RecycledDocument",
    "FolderSummary",
    "DocumentStore",
    "StoreResult",
    "FolderOperations",
    "DocumentSearch",
    "DocumentManager",
    "RenameIdle",
    "RenameEditing",
    "DocumentService",
    "RecycleBin",
]
